"""Search-box autocomplete endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.core.dependencies import get_async_session
from mp_api.schemas.autocomplete import AutocompleteResponse, SuggestionResponse
from mp_api.services.autocomplete_service import suggest

autocomplete_router = APIRouter(prefix="/autocomplete", tags=["autocomplete"])


@autocomplete_router.get("", response_model=AutocompleteResponse)
async def autocomplete(
    q: str | None = Query(None, description="Partial name, riding or postal code"),
    session: AsyncSession = Depends(get_async_session),
) -> AutocompleteResponse:
    """Suggest representatives, ridings and postal codes for a partial query."""
    try:
        suggestions = await suggest(session, q)
    except Exception as e:
        logger.error(f"Unexpected error building autocomplete suggestions: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error building suggestions.",
        ) from e
    return AutocompleteResponse(suggestions=[SuggestionResponse.model_validate(s) for s in suggestions])
