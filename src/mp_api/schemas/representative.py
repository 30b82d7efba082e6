"""Pydantic v2 schemas for representative lookups."""

from pydantic import BaseModel, Field


class RepresentativeResponse(BaseModel):
    """A representative as returned by search and detail endpoints."""

    model_config = {"from_attributes": True}

    id: int
    name: str
    first_name: str | None = None
    last_name: str | None = None
    district_name: str
    district_id: str | None = None
    elected_office: str = "MP"
    party_name: str | None = None
    email: str | None = None
    phone: str | None = None
    photo_url: str | None = None
    url: str | None = None
    source_url: str | None = None
    personal_url: str | None = None
    gender: str | None = None


class RepresentativeSearchResults(BaseModel):
    """Several representatives matched a name search."""

    results: list[RepresentativeResponse]
    count: int = Field(description="Number of matches returned")
