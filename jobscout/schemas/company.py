"""Company schemas."""

from pydantic import BaseModel, Field


class CompanyCreate(BaseModel):
    """Schema for creating a tracked company."""

    name: str = Field(..., min_length=1, max_length=255)
    career_page_url: str = Field(..., min_length=1, max_length=1024)


class CompanyUpdate(BaseModel):
    """Partial company update; source type is re-detected if the URL changes."""

    name: str | None = Field(None, min_length=1, max_length=255)
    career_page_url: str | None = Field(None, min_length=1, max_length=1024)
    active: bool | None = None
    description: str | None = None
    headquarters: str | None = None
    founded_year: int | None = None
    revenue_estimate: str | None = None
    stage: str | None = None

