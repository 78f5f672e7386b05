"""Political support tracking for the gridpolicy simulation core."""

from pydantic import BaseModel, Field

from gridpolicy.utils.logger import logger
from gridpolicy.utils.types import MAX_SUPPORT, MIN_SUPPORT, Fraction, clamp


class SupportTracker(BaseModel):
    """Accumulates the political support score across turns.

    All deltas for a turn are summed by the caller and committed with a
    single ``update`` call, so the stored score is only ever clamped once
    per turn.
    """

    score: Fraction = Field(..., ge=MIN_SUPPORT, le=MAX_SUPPORT, description="Current support in [0, 1]")
    history: list[Fraction] = Field(default_factory=list, description="Committed scores, oldest first")

    def model_post_init(self, __context: object) -> None:
        """Seed the history with the starting score."""
        if not self.history:
            self.history.append(self.score)

    def update(self, delta: float) -> Fraction:
        """Apply a combined delta and commit the clamped result.

        Args:
            delta: Sum of every support effect for the turn

        Returns:
            The new support score
        """
        new_score = clamp(self.score + delta, MIN_SUPPORT, MAX_SUPPORT)
        if new_score != self.score + delta:
            logger.debug(f"Support clamped: {self.score + delta:.3f} -> {new_score:.3f}")

        self.score = new_score
        self.history.append(new_score)
        return new_score

    @property
    def is_depleted(self) -> bool:
        """Whether support has reached zero, which ends the game."""
        return self.score <= MIN_SUPPORT


__all__ = ["SupportTracker"]
