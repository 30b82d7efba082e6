"""Pydantic v2 schemas for the representative statistics endpoint."""

from datetime import date

from pydantic import BaseModel, Field

from mp_api.models.bill_sponsorship import SponsorshipType, SponsorType
from mp_api.models.vote import VoteResult, VoteType


class VoteResponse(BaseModel):
    """A single vote in a voting record, with its bill category."""

    model_config = {"from_attributes": True}

    id: str
    date: date
    bill_number: str | None = None
    bill_title: str | None = None
    motion_title: str
    vote_type: VoteType
    result: VoteResult
    party_position: str | None = None
    sponsor_party: str | None = None
    category: str | None = None


class VotingRecordResponse(BaseModel):
    model_config = {"from_attributes": True}

    representative_id: int
    representative_name: str
    total_votes: int
    votes: list[VoteResponse]


class PartyLoyaltyResponse(BaseModel):
    """Party loyalty aggregate; percentages are of the bucketed votes."""

    model_config = {"from_attributes": True}

    representative_id: int
    representative_name: str
    party_name: str
    total_votes: int = Field(description="Number of session-filtered votes")
    votes_with_party: int
    votes_against_party: int
    free_votes: int
    abstained_paired_votes: int
    loyalty_percentage: float
    opposition_percentage: float
    free_vote_percentage: float


class MotionResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    number: str | None = None
    title: str
    type: SponsorshipType
    status: str | None = None
    introduced_date: date | None = None
    sponsor_type: SponsorType
    url: str | None = None
    category: str | None = None


class MotionBreakdownResponse(BaseModel):
    """Bills and motions sponsored or seconded in the current session."""

    model_config = {"from_attributes": True}

    representative_id: int
    representative_name: str
    total_motions: int
    bills_sponsored: int
    bills_co_sponsored: int
    motions_sponsored: int
    motions_co_sponsored: int
    motions: list[MotionResponse]


class RepresentativeStatsResponse(BaseModel):
    """Combined statistics for one representative."""

    model_config = {"from_attributes": True, "populate_by_name": True}

    voting_record: VotingRecordResponse
    party_loyalty: PartyLoyaltyResponse
    motions: MotionBreakdownResponse
    data_valid: bool = Field(
        alias="dataValid",
        description="False when the loyalty buckets do not add up to the session-filtered vote count",
    )
