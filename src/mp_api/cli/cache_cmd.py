"""Cache maintenance CLI commands."""

import asyncio
from typing import Annotated

import typer
from loguru import logger

cache_app = typer.Typer()


@cache_app.command("clear")
def clear(
    expired_only: Annotated[
        bool, typer.Option("--expired-only", help="Only purge expired postal code mappings")
    ] = False,
    include_bill_categories: Annotated[
        bool, typer.Option("--include-bill-categories", help="Also delete stored bill categories")
    ] = False,
) -> None:
    """Clear the postal code cache and party loyalty snapshots."""
    asyncio.run(_clear_impl(expired_only=expired_only, include_bill_categories=include_bill_categories))


async def _clear_impl(*, expired_only: bool, include_bill_categories: bool) -> None:
    """Async implementation of the clear command."""
    from sqlalchemy import delete

    from mp_api.core.config import get_settings
    from mp_api.core.database import Database
    from mp_api.models.bill_category import BillCategoryAssignment
    from mp_api.services import party_loyalty_service, postal_code_cache_service

    settings = get_settings()
    database = Database(settings.database_url, schema=settings.database_schema)
    try:
        async with database.session() as session:
            if expired_only:
                purged = await postal_code_cache_service.purge_expired(session)
                typer.echo(f"Purged {purged} expired postal code mappings")
                return

            postal = await postal_code_cache_service.clear(session)
            snapshots = await party_loyalty_service.clear(session)
            typer.echo(f"Deleted {postal} postal code mappings and {snapshots} loyalty snapshots")

            if include_bill_categories:
                result = await session.execute(delete(BillCategoryAssignment))
                await session.commit()
                typer.echo(f"Deleted {result.rowcount or 0} bill categories")
                logger.warning("Bill categories cleared; they will be re-classified on demand")
    finally:
        await database.dispose()
