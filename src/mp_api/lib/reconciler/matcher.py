"""Match an upstream district name against the local roster.

Redistricting means the upstream service can lag the roster: upstream may
still say ``Oakville`` after the roster has split the riding into
``Oakville East`` and ``Oakville West``. Matching therefore falls back from
exact comparison to substring containment with a deterministic tie-break.
"""

import enum
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from loguru import logger


class RosterEntry(Protocol):
    """The attributes reconciliation reads from a roster row."""

    id: Any
    name: str
    district_name: str


class MatchStrategy(enum.StrEnum):
    """Rule that selected the representative."""

    EXACT = "exact"
    CASE_INSENSITIVE = "case_insensitive"
    FUZZY = "fuzzy"
    FUZZY_PREFIX = "fuzzy_prefix"
    FUZZY_ALPHABETICAL = "fuzzy_alphabetical"
    NONE = "none"


@dataclass
class ReconcileResult:
    """Outcome of reconciling one district name."""

    representative: Any | None
    strategy: MatchStrategy
    candidates: list[Any] = field(default_factory=list)

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1


def _sort_key(entry: RosterEntry) -> tuple[str, str, str, str]:
    district = entry.district_name or ""
    return (district.casefold(), district, entry.name or "", str(entry.id))


def _fold(value: str | None) -> str:
    return (value or "").strip().lower()


def reconcile_district(district_name: str, roster: Sequence[RosterEntry]) -> ReconcileResult:
    """Pick the roster entry whose district matches ``district_name``.

    Rules, in order:

    1. Exact, case-sensitive equality.
    2. Case-insensitive equality.
    3. Containment on trimmed, lower-cased names in either direction.
       Roster entries with a blank district name never match here.
    4. Among several containment candidates, those starting with the
       upstream name followed by a space are preferred. The first such
       candidate in district order wins; without any, the first candidate
       in district order wins.

    The roster is sorted before any rule is applied so the outcome never
    depends on the order rows came back from the database.

    Args:
        district_name: District name reported upstream (or cached).
        roster: Every representative currently on record.

    Returns:
        ReconcileResult; ``representative`` is None when nothing matches.
    """
    ordered = sorted(roster, key=_sort_key)

    for entry in ordered:
        if entry.district_name == district_name:
            return ReconcileResult(entry, MatchStrategy.EXACT, [entry])

    wanted = _fold(district_name)
    if not wanted:
        return ReconcileResult(None, MatchStrategy.NONE)

    for entry in ordered:
        if _fold(entry.district_name) == wanted:
            return ReconcileResult(entry, MatchStrategy.CASE_INSENSITIVE, [entry])

    candidates = [
        entry
        for entry in ordered
        if (folded := _fold(entry.district_name)) and (folded == wanted or wanted in folded or folded in wanted)
    ]
    if not candidates:
        return ReconcileResult(None, MatchStrategy.NONE)
    if len(candidates) == 1:
        return ReconcileResult(candidates[0], MatchStrategy.FUZZY, candidates)

    prefixed = [entry for entry in candidates if _fold(entry.district_name).startswith(wanted + " ")]
    if prefixed:
        chosen, strategy = prefixed[0], MatchStrategy.FUZZY_PREFIX
    else:
        chosen, strategy = candidates[0], MatchStrategy.FUZZY_ALPHABETICAL

    logger.bind(stage="reconcile").info(
        f"District {district_name!r} matched {len(candidates)} roster entries "
        f"({', '.join(c.district_name for c in candidates)}); selected {chosen.district_name!r} via {strategy}"
    )
    return ReconcileResult(chosen, strategy, candidates)
