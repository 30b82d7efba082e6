"""Representative lookup and statistics endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from mp_api.core.background import BackgroundTaskRunner
from mp_api.core.config import Settings
from mp_api.core.database import Database
from mp_api.core.dependencies import (
    get_app_settings,
    get_async_session,
    get_bill_category_cache,
    get_database,
    get_resolver,
    get_task_runner,
)
from mp_api.lib.postal_code import PostalCodeValidationError
from mp_api.schemas.representative import RepresentativeResponse, RepresentativeSearchResults
from mp_api.schemas.stats import RepresentativeStatsResponse
from mp_api.services.bill_category_service import BillCategoryCache, categorize_representative_bills
from mp_api.services.resolver_service import RepresentativeResolver
from mp_api.services.stats_service import build_representative_stats

representatives_router = APIRouter(prefix="/mps", tags=["representatives"])


# ---------------------------------------------------------------------------
# Fixed-prefix routes BEFORE parameterized routes
# ---------------------------------------------------------------------------


@representatives_router.get(
    "/search",
    response_model=RepresentativeResponse | RepresentativeSearchResults,
    responses={400: {"description": "Invalid or missing query"}, 404: {"description": "No representative found"}},
)
async def search_representatives(
    postal_code: str | None = Query(None, description="Canadian postal code, any case or spacing"),
    name: str | None = Query(None, description="Full or partial representative name"),
    session: AsyncSession = Depends(get_async_session),
    resolver: RepresentativeResolver = Depends(get_resolver),
) -> RepresentativeResponse | RepresentativeSearchResults:
    """Find a representative by name or postal code.

    A name search with several matches returns them all for the caller to
    choose from. A name takes precedence when both parameters are given.
    """
    if name and name.strip():
        try:
            matches = await resolver.resolve_by_name(session, name)
        except Exception as e:
            logger.error(f"Unexpected error searching representatives by name: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to search for MP by name.",
            ) from e
        if not matches:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No MPs found matching that name.")
        if len(matches) == 1:
            return RepresentativeResponse.model_validate(matches[0])
        return RepresentativeSearchResults(
            results=[RepresentativeResponse.model_validate(m) for m in matches],
            count=len(matches),
        )

    if not postal_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either postal code or name is required",
        )

    try:
        resolution = await resolver.resolve_by_postal_code(session, postal_code)
    except PostalCodeValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid Canadian postal code format. Expected format: A1A 1A1",
        ) from e
    except Exception as e:
        logger.error(f"Unexpected error resolving postal code: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to search for MP.",
        ) from e

    if resolution.representative is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No MP found for this postal code.",
        )
    return RepresentativeResponse.model_validate(resolution.representative)


@representatives_router.get(
    "/{identifier}/stats",
    response_model=RepresentativeStatsResponse,
    responses={404: {"description": "Representative not found"}},
)
async def get_representative_stats(
    identifier: str,
    session: AsyncSession = Depends(get_async_session),
    resolver: RepresentativeResolver = Depends(get_resolver),
    cache: BillCategoryCache = Depends(get_bill_category_cache),
    database: Database = Depends(get_database),
    task_runner: BackgroundTaskRunner = Depends(get_task_runner),
    settings: Settings = Depends(get_app_settings),
) -> RepresentativeStatsResponse:
    """Voting record, party loyalty and sponsorships for one representative.

    The identifier is a district name, district id or exact representative
    name. A loyalty aggregate that does not add up is reported with
    ``dataValid: false`` rather than as an error.
    """
    representative = await resolver.get_by_identifier(session, identifier)
    if representative is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="MP not found")

    try:
        stats = await build_representative_stats(
            session,
            cache,
            representative,
            display_limit=settings.categorize_display_limit,
            voting_record_limit=settings.voting_record_limit,
        )
    except Exception as e:
        logger.error(f"Unexpected error building stats for {representative.name}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch MP stats",
        ) from e

    if settings.background_categorization_enabled:
        task_runner.submit_task(
            categorize_representative_bills(database, cache, representative.id),
            name=f"categorize-bills:{representative.id}",
        )
    return RepresentativeStatsResponse.model_validate(stats)


@representatives_router.get(
    "/{identifier}",
    response_model=RepresentativeResponse,
    responses={404: {"description": "Representative not found"}},
)
async def get_representative(
    identifier: str,
    session: AsyncSession = Depends(get_async_session),
    resolver: RepresentativeResolver = Depends(get_resolver),
) -> RepresentativeResponse:
    """Get a representative by district name, district id or exact name."""
    representative = await resolver.get_by_identifier(session, identifier)
    if representative is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="MP not found")
    return RepresentativeResponse.model_validate(representative)
