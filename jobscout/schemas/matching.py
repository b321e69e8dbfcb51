"""Match score breakdown schemas."""

from pydantic import BaseModel, Field


class ScoreBreakdownCategory(BaseModel):
    """Points earned in one scoring category."""

    name: str
    earned: int = Field(..., ge=0)
    possible: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100)
    details: str


class ProfilePreferences(BaseModel):
    """The profile preferences the score was computed against."""

    titles: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    remote_only: bool = False


class ScoreBreakdown(BaseModel):
    """Total match score decomposed into named categories."""

    total_score: int = Field(..., ge=0, le=100)
    categories: list[ScoreBreakdownCategory]
    profile_preferences: ProfilePreferences

    @property
    def possible(self) -> int:
        """Sum of possible points across the contributing categories."""
        return sum(c.possible for c in self.categories)
