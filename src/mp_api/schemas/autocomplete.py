"""Pydantic v2 schemas for search-box autocomplete."""

from pydantic import BaseModel, Field


class SuggestionResponse(BaseModel):
    model_config = {"from_attributes": True}

    type: str = Field(description="Suggestion kind: mp, riding or postal_code")
    label: str
    value: str
    subtitle: str | None = None


class AutocompleteResponse(BaseModel):
    suggestions: list[SuggestionResponse]
