"""Search-box suggestions: postal codes, representatives and ridings."""

import enum
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.lib.postal_code import (
    format_postal_code,
    is_partial_postal_code,
    normalize_postal_code,
    validate_postal_code,
)
from mp_api.services import representative_service

MIN_QUERY_LENGTH = 2
MAX_SUGGESTIONS = 10
MAX_PER_KIND = 5
POSTAL_CODE_HINT = "Enter postal code (e.g., K1A 0A6)"


class SuggestionType(enum.StrEnum):
    MP = "mp"
    RIDING = "riding"
    POSTAL_CODE = "postal_code"


@dataclass
class Suggestion:
    type: SuggestionType
    label: str
    value: str
    subtitle: str | None = None


def _postal_code_suggestion(term: str) -> Suggestion | None:
    if not is_partial_postal_code(term):
        return None
    normalized = normalize_postal_code(term)
    if len(normalized) == 6:
        if not validate_postal_code(normalized):
            return None
        formatted = format_postal_code(normalized)
        return Suggestion(SuggestionType.POSTAL_CODE, formatted, formatted, "Postal code")
    return Suggestion(SuggestionType.POSTAL_CODE, term, term, POSTAL_CODE_HINT)


async def suggest(session: AsyncSession, query: str | None) -> list[Suggestion]:
    """Build up to ten suggestions for a partial search string.

    Args:
        session: Database session.
        query: Raw search box text.

    Returns:
        Postal code suggestion first (if the text looks like one), then up to
        five representatives, then up to five ridings.
    """
    term = (query or "").strip()
    if len(term) < MIN_QUERY_LENGTH:
        return []

    suggestions: list[Suggestion] = []
    postal = _postal_code_suggestion(term)
    if postal is not None:
        suggestions.append(postal)

    representatives = await representative_service.search_by_name(session, term, limit=MAX_PER_KIND)
    suggestions.extend(
        Suggestion(SuggestionType.MP, rep.name, rep.name, rep.district_name or None) for rep in representatives
    )

    districts = await representative_service.search_districts(session, term, limit=MAX_PER_KIND)
    suggestions.extend(Suggestion(SuggestionType.RIDING, name, name, "Riding") for name in districts)

    return suggestions[:MAX_SUGGESTIONS]
