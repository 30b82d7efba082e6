"""Party-loyalty aggregation over a representative's votes.

Public API:
    - compute_party_loyalty: Bucket votes and derive percentages
    - normalize_to_major_party: Map party name variants to the five major parties
    - PartyLoyaltyStats: Aggregate result
"""

from mp_api.lib.loyalty.aggregate import (
    MAJOR_PARTIES,
    PartyLoyaltyStats,
    compute_party_loyalty,
    normalize_to_major_party,
)

__all__ = ["MAJOR_PARTIES", "PartyLoyaltyStats", "compute_party_loyalty", "normalize_to_major_party"]
