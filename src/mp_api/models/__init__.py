"""ORM model registry: import all models so Alembic autogenerate discovers them."""

from mp_api.models.bill_category import BillCategoryAssignment
from mp_api.models.bill_sponsorship import BillSponsorship, SponsorshipType, SponsorType
from mp_api.models.parliament_session import ParliamentSession
from mp_api.models.party_loyalty import PartyLoyaltySnapshot
from mp_api.models.postal_code import PostalCodeCacheEntry, PostalCodeMapping
from mp_api.models.representative import Representative
from mp_api.models.vote import Vote, VoteResult, VoteType

__all__ = [
    "BillCategoryAssignment",
    "BillSponsorship",
    "ParliamentSession",
    "PartyLoyaltySnapshot",
    "PostalCodeCacheEntry",
    "PostalCodeMapping",
    "Representative",
    "SponsorType",
    "SponsorshipType",
    "Vote",
    "VoteResult",
    "VoteType",
]
