"""CLI module for the gridpolicy simulation core.

The CLI enables:
- Playing a game from the terminal with a scripted policy sequence
- Listing the policy menu of a configuration
- Generating an example configuration file
"""

from .main import app, create_cli_app

__all__ = ["app", "create_cli_app"]
