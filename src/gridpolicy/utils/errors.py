"""Error taxonomy for the gridpolicy simulation core.

``InvalidArgumentError`` and ``InvalidStateError`` are usage errors surfaced
to the caller before any state is mutated. ``PolicyRejectedError``,
``PolicyVoteFailedError`` and ``ShockTargetMissingError`` are expected
conditions that the orchestrator and shock engine recover from and record.
"""


class GridPolicyError(Exception):
    """Base class for all simulation errors."""


class InvalidArgumentError(GridPolicyError, ValueError):
    """Raised for malformed season, plant or policy identifiers."""


class InvalidStateError(GridPolicyError, RuntimeError):
    """Raised when an operation is not allowed in the current game state."""


class PolicyRejectedError(GridPolicyError):
    """Raised by the resolver when a policy is ineligible under current state."""

    def __init__(self, policy_id: str, reason: str):
        super().__init__(f"Policy '{policy_id}' rejected: {reason}")
        self.policy_id = policy_id
        self.reason = reason


class PolicyVoteFailedError(GridPolicyError):
    """Raised by the resolver when an eligible policy loses its vote."""

    def __init__(self, policy_id: str, probability: float):
        super().__init__(f"Vote on policy '{policy_id}' failed (pass chance {probability:.2f})")
        self.policy_id = policy_id
        self.probability = probability


class ShockTargetMissingError(GridPolicyError):
    """Raised when a shock's target plant no longer exists or is inactive."""

    def __init__(self, template_id: str, reason: str):
        super().__init__(f"Shock '{template_id}' dropped: {reason}")
        self.template_id = template_id
        self.reason = reason


__all__ = [
    "GridPolicyError",
    "InvalidArgumentError",
    "InvalidStateError",
    "PolicyRejectedError",
    "PolicyVoteFailedError",
    "ShockTargetMissingError",
]
