"""Job profile schemas used by the scoring engine."""

from pydantic import BaseModel, Field


class JobProfileData(BaseModel):
    """Scoring input for one user.

    Built from the JobProfile row (``from_attributes``) or directly in tests.
    """

    keywords: list[str] = Field(default_factory=list)
    titles: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    excluded_titles: list[str] = Field(default_factory=list)
    excluded_locations: list[str] = Field(default_factory=list)
    remote_only: bool = False

    class Config:
        from_attributes = True

    @property
    def has_preferences(self) -> bool:
        """True when at least one scoring category is configured."""
        return bool(self.titles or self.keywords or self.locations or self.remote_only)


class JobProfileUpdate(BaseModel):
    """Partial update for a job profile; omitted fields are left unchanged."""

    keywords: list[str] | None = None
    titles: list[str] | None = None
    locations: list[str] | None = None
    excluded_titles: list[str] | None = None
    excluded_locations: list[str] | None = None
    remote_only: bool | None = None

