"""Party-loyalty aggregation.

Only votes on bills sponsored by one of the five major parties are bucketed:

* Paired, Abstained or Not Voting: abstained/paired, whoever sponsored.
* Bill sponsored by the representative's own party: Yea is with the party,
  Nay is against it.
* Bill sponsored by another party: Yea is a free vote, Nay is excluded.

Votes without a bill number or sponsor party are excluded.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from mp_api.models.vote import VoteType

MAJOR_PARTIES = ("Liberal", "Conservative", "Bloc Québécois", "NDP", "Green Party")

_ABSTAINED_VOTE_TYPES = frozenset({VoteType.PAIRED, VoteType.ABSTAINED, VoteType.NOT_VOTING})


def normalize_to_major_party(party_name: str | None) -> str | None:
    """Map a party name or abbreviation to one of :data:`MAJOR_PARTIES`.

    Args:
        party_name: Party name as stored (e.g. ``"Liberal Party of Canada"``, ``"CPC"``).

    Returns:
        The major party name, or None for minor parties, independents and blanks.
    """
    if not party_name:
        return None
    lower = party_name.strip().lower()
    if "liberal" in lower or lower in ("lib", "lpc"):
        return "Liberal"
    if "conservative" in lower or lower in ("cpc", "con", "pc"):
        return "Conservative"
    if "bloc" in lower or "quebecois" in lower or "québécois" in lower or lower == "bq":
        return "Bloc Québécois"
    if "ndp" in lower or "new democratic" in lower or lower == "npd":
        return "NDP"
    if "green" in lower or lower in ("gpc", "gp"):
        return "Green Party"
    return None


@dataclass
class PartyLoyaltyStats:
    """Bucketed vote counts and percentages of the bucketed total."""

    votes_with_party: int = 0
    votes_against_party: int = 0
    free_votes: int = 0
    abstained_paired_votes: int = 0
    excluded_votes: int = 0

    @property
    def bucket_total(self) -> int:
        return self.votes_with_party + self.votes_against_party + self.free_votes + self.abstained_paired_votes

    def _percentage(self, count: int) -> float:
        total = self.bucket_total
        return (count / total) * 100 if total > 0 else 0.0

    @property
    def loyalty_percentage(self) -> float:
        return self._percentage(self.votes_with_party)

    @property
    def opposition_percentage(self) -> float:
        return self._percentage(self.votes_against_party)

    @property
    def free_vote_percentage(self) -> float:
        return self._percentage(self.free_votes)


def compute_party_loyalty(votes: Iterable[Any], party_name: str | None) -> PartyLoyaltyStats:
    """Bucket ``votes`` relative to the representative's party.

    Args:
        votes: Objects with ``bill_number``, ``sponsor_party`` and ``vote_type``.
        party_name: The representative's party name.

    Returns:
        PartyLoyaltyStats over the given votes.
    """
    own_party = normalize_to_major_party(party_name)
    stats = PartyLoyaltyStats()
    total = 0

    for vote in votes:
        total += 1
        if not vote.bill_number or not vote.sponsor_party:
            stats.excluded_votes += 1
            continue
        sponsor = normalize_to_major_party(vote.sponsor_party)
        if sponsor is None:
            stats.excluded_votes += 1
            continue

        if vote.vote_type in _ABSTAINED_VOTE_TYPES:
            stats.abstained_paired_votes += 1
        elif own_party is not None and sponsor == own_party:
            if vote.vote_type == VoteType.YEA:
                stats.votes_with_party += 1
            elif vote.vote_type == VoteType.NAY:
                stats.votes_against_party += 1
            else:
                stats.excluded_votes += 1
        elif vote.vote_type == VoteType.YEA:
            stats.free_votes += 1
        else:
            stats.excluded_votes += 1

    if stats.excluded_votes > 0 and stats.excluded_votes > total * 0.1:
        logger.bind(stage="loyalty").info(
            f"{stats.excluded_votes} of {total} votes excluded from party loyalty "
            "(no sponsor information or Nay on another party's bill)"
        )
    return stats
