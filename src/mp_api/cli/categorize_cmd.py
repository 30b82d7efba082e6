"""CLI commands for bill categorization."""

import asyncio
from typing import Annotated

import typer

categorize_app = typer.Typer()


@categorize_app.command("mp")
def categorize_mp(
    representative_id: Annotated[int, typer.Argument(help="Representative database id")],
) -> None:
    """Categorize every bill a representative has voted on."""
    asyncio.run(_categorize_impl(representative_id))


async def _categorize_impl(representative_id: int) -> None:
    """Async implementation of the mp command."""
    from mp_api.core.config import get_settings
    from mp_api.core.database import Database
    from mp_api.lib.bills import build_classifier
    from mp_api.services import representative_service
    from mp_api.services.bill_category_service import BillCategoryCache, categorize_representative_bills

    settings = get_settings()
    database = Database(settings.database_url, schema=settings.database_schema)
    classifier = build_classifier(settings)
    try:
        async with database.session() as session:
            representative = await representative_service.get_representative(session, representative_id)
        if representative is None:
            typer.echo(f"Representative {representative_id} not found", err=True)
            raise typer.Exit(code=1)
        report = await categorize_representative_bills(database, BillCategoryCache(classifier), representative_id)
    finally:
        close_classifier = getattr(classifier, "close", None)
        if close_classifier is not None:
            await close_classifier()
        await database.dispose()

    typer.echo(
        f"{representative.name} ({representative.district_name})\n"
        f"  Bills: {report.total}\n"
        f"  Already categorized: {report.already_categorized}\n"
        f"  Newly categorized: {report.newly_categorized}\n"
        f"  Unclassified: {len(report.unclassified)}\n"
        f"  Failed: {report.failed}"
    )
    for failure in report.failures:
        typer.echo(f"  ! {failure}", err=True)
