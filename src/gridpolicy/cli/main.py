"""Main CLI interface for the gridpolicy simulation core.

This module provides the command-line driver built on Typer. It plays games
non-interactively from a scripted policy sequence, which is how the core is
exercised outside a graphical front end.

Usage:
    gridpolicy play --policy build_solar_park --policy pass --seed 7
    gridpolicy list-policies --config game.yaml
    gridpolicy init-config game.yaml
    gridpolicy version
"""

import logging
import sys
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from gridpolicy.api import advance_turn, get_snapshot, list_available_policies, start_game
from gridpolicy.config import GameConfig, Policy, YamlConfigLoader, default_game_config, load_config_from_yaml
from gridpolicy.sim.engine import GameEngine, TurnResult
from gridpolicy.sim.persistence import load_game, save_game
from gridpolicy.utils.enums import GameState, PolicyOutcome
from gridpolicy.utils.errors import GridPolicyError
from gridpolicy.utils.logger import configure_logging, logger
from gridpolicy.utils.types import ALL_SEASONS

PASS_TOKENS = {"pass", "none", "-"}

# Create console for rich output
console = Console()

# Create main Typer app
app = typer.Typer(
    name="gridpolicy",
    help="gridpolicy - turn-based energy-policy grid simulation",
    add_completion=False,
    rich_markup_mode="rich",
)


def create_cli_app() -> typer.Typer:
    """Create and configure the CLI application.

    Returns:
        Configured Typer application
    """
    return app


@app.command()
def play(
    config_file: str | None = typer.Option(None, "--config", "-c", help="Configuration file path"),
    policies: list[str] | None = typer.Option(
        None, "--policy", "-p", help="Policy for each turn, in order ('pass' to skip a turn)"
    ),
    turns: int | None = typer.Option(None, "--turns", "-t", help="Stop after this many turns"),
    seed: int | None = typer.Option(None, "--seed", "-s", help="Seed for shocks and votes (not with --load)"),
    save_path: str | None = typer.Option(None, "--save", help="Write the game to this file when done"),
    load_path: str | None = typer.Option(None, "--load", help="Resume a saved game"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> dict[str, Any]:
    """Play a game with a scripted policy sequence."""
    return play_command(
        config_file=config_file,
        policies=policies,
        turns=turns,
        seed=seed,
        save_path=save_path,
        load_path=load_path,
        verbose=verbose,
    )


def play_command(
    config_file: str | None = None,
    policies: list[str] | None = None,
    turns: int | None = None,
    seed: int | None = None,
    save_path: str | None = None,
    load_path: str | None = None,
    verbose: bool = False,
) -> dict[str, Any]:
    """Execute the play command.

    Turns beyond the end of ``policies`` are passed. The game runs until it
    ends or ``turns`` turns have been played.

    Args:
        config_file: Optional configuration file path
        policies: Policy id per turn
        turns: Optional cap on turns played by this invocation
        seed: Optional seed for shocks and votes (overrides the configuration)
        save_path: Optional file to save the game to afterwards
        load_path: Optional saved game to resume instead of starting fresh
        verbose: Enable debug logging

    Returns:
        Game summary dictionary

    Raises:
        ValueError: If ``turns`` is negative, or ``seed`` is given with ``load_path``
        FileNotFoundError: If the config or save file is not found
    """
    if turns is not None and turns < 0:
        raise ValueError("Number of turns must be non-negative")
    if load_path and seed is not None:
        raise ValueError("--seed cannot be combined with --load; a saved game keeps its own random state")

    if verbose:
        logger.setLevel(logging.DEBUG)

    if load_path:
        engine = load_game(load_path)
    else:
        config = load_cli_config(config_file) if config_file else create_default_config()
        if seed is not None:
            config.shocks.seed = seed
            config.vote_seed = seed
        if config_file and not verbose:
            configure_logging(config.logging)
        engine = start_game(config)

    console.print(f"[bold green]Playing gridpolicy game[/bold green] (turn {engine.turn}/{engine.horizon})")

    script = list(policies or [])
    played = 0
    try:
        while engine.state == GameState.IN_PROGRESS and (turns is None or played < turns):
            policy_id = script[played] if played < len(script) else None
            if policy_id is not None and policy_id.strip().lower() in PASS_TOKENS:
                policy_id = None
            result = advance_turn(engine, policy_id)
            _print_turn(result)
            played += 1
    except GridPolicyError as e:
        console.print(f"[bold red]Game error: {e}[/bold red]")
        summary = engine.get_summary()
        summary["status"] = "error"
        summary["error_message"] = str(e)
        return summary

    snapshot = get_snapshot(engine)
    console.print(
        f"[bold cyan]Turn {snapshot.turn}/{snapshot.horizon}[/bold cyan] "
        f"state={snapshot.state.value} support={snapshot.support:.2f}"
    )
    if snapshot.end_reason is not None:
        console.print(f"[bold]Game over:[/bold] {snapshot.end_reason.value}")

    if save_path:
        save_game(engine, save_path)
        console.print(f"[dim]Saved to {save_path}[/dim]")

    summary = engine.get_summary()
    summary["status"] = "success"
    summary["turns_played"] = played
    return summary


def _print_turn(result: TurnResult) -> None:
    table = Table(title=f"Turn {result.turn}", show_header=True)
    table.add_column("Season", style="cyan")
    table.add_column("Demand", justify="right")
    table.add_column("Supply", justify="right")
    table.add_column("Margin", justify="right")
    for season in ALL_SEASONS:
        margin = result.balance.margin(season)
        table.add_row(
            season.value,
            f"{result.balance.demand[season]:.1f}",
            f"{result.balance.supply[season]:.1f}",
            f"[{'green' if margin >= 0 else 'red'}]{margin:+.1f}[/]",
        )
    console.print(table)

    if result.policy_outcome == PolicyOutcome.APPLIED:
        console.print(f"  Policy: [green]{result.applied_policy}[/green]")
    elif result.policy_outcome == PolicyOutcome.REJECTED:
        console.print(f"  Policy: [red]{result.applied_policy} rejected[/red] ({result.rejection_reason})")
    elif result.policy_outcome == PolicyOutcome.VOTE_FAILED:
        chance = f"{result.vote_probability:.0%} chance"
        console.print(f"  Policy: [red]{result.applied_policy} lost its vote[/red] ({chance})")
    for shock in result.fired_shocks:
        survived = {True: " (survived)", False: " (requirements missed)", None: ""}[shock.survived]
        console.print(f"  Shock: [yellow]{shock.name or shock.template_id}[/yellow]{survived}")
    for shock in result.dropped_shocks:
        console.print(f"  Shock dropped: [dim]{shock.template_id}[/dim] ({shock.reason})")
    for policy_id in result.finished_campaigns:
        console.print(f"  Campaign finished: [green]{policy_id}[/green]")
    for plant_id in result.decommissioned_plants:
        console.print(f"  Decommissioned: [dim]{plant_id}[/dim]")
    console.print(f"  Support: {result.new_support:.2f} ({result.support_delta:+.2f})")


@app.command("list-policies")
def list_policies(
    config_file: str | None = typer.Option(None, "--config", "-c", help="Configuration file path"),
) -> list[str]:
    """List the policy menu and which policies are available on the first turn."""
    return list_policies_command(config_file)


def list_policies_command(config_file: str | None = None) -> list[str]:
    """Execute the list policies command.

    Returns:
        Policy ids in menu order
    """
    config = load_cli_config(config_file) if config_file else create_default_config()
    engine = GameEngine(config)
    engine.start()
    available = {policy.policy_id for policy in list_available_policies(engine)}

    table = Table(title="Policy menu")
    table.add_column("Policy", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Support", justify="right")
    table.add_column("Window", justify="right")
    table.add_column("Vote", justify="right")
    table.add_column("Available", justify="center")
    for policy in config.policies:
        table.add_row(
            policy.policy_id,
            policy.description or policy.name,
            f"{policy.support_delta:+.2f}",
            f"{policy.min_support:.2f}-{policy.max_support:.2f}",
            _vote_label(policy),
            "yes" if policy.policy_id in available else "no",
        )
    console.print(table)

    return [policy.policy_id for policy in config.policies]


def _vote_label(policy: Policy) -> str:
    if policy.is_campaign:
        return f"campaign, {policy.campaign_turns} turns"
    if policy.vote_probability is not None:
        return f"{policy.vote_probability:.0%}"
    return "-"


@app.command("init-config")
def init_config(
    path: str = typer.Argument("gridpolicy.yaml", help="Where to write the example configuration"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> str:
    """Write an example configuration with the built-in game catalog."""
    return init_config_command(path, force)


def init_config_command(path: str, force: bool = False) -> str:
    """Execute the init config command.

    Raises:
        FileExistsError: If the file exists and ``force`` is not set
    """
    config_path = Path(path)
    if config_path.exists() and not force:
        raise FileExistsError(f"Configuration file already exists: {config_path}")

    YamlConfigLoader().generate_example_config(config_path)
    console.print(f"[green]Wrote example configuration to {config_path}[/green]")
    return str(config_path)


@app.command()
def version() -> str:
    """Show gridpolicy version information."""
    return version_command()


def version_command() -> str:
    """Execute version command.

    Returns:
        Version string
    """
    from gridpolicy import __version__

    version_info = f"gridpolicy v{__version__}"
    console.print(f"[bold cyan]{version_info}[/bold cyan]")
    console.print("[dim]Turn-based energy-policy grid simulation[/dim]")
    return version_info


def load_cli_config(config_file: str) -> GameConfig:
    """Load CLI configuration from file.

    Sections missing from the file are filled from the built-in game.

    Raises:
        FileNotFoundError: If config file not found
    """
    return load_config_from_yaml(config_file, merge_defaults=True)


def create_default_config() -> GameConfig:
    """Create the built-in game configuration."""
    return default_game_config()


# Main entry point for console script
def main() -> None:
    """Console script entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Game interrupted.[/yellow]")
        sys.exit(1)


if __name__ == "__main__":
    main()
