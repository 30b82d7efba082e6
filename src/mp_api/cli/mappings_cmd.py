"""CLI commands for manual postal code mappings."""

from __future__ import annotations

import asyncio
import csv
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from loguru import logger

if TYPE_CHECKING:
    from mp_api.services.manual_mapping_service import MappingRow

mappings_app = typer.Typer()


def read_mapping_csv(path: Path) -> list[MappingRow]:
    """Read mapping rows from a CSV file.

    The file needs a ``postal_code`` column plus ``representative_id`` and/or
    ``district_name``.

    Raises:
        typer.BadParameter: If the file has no ``postal_code`` column or an invalid id.
    """
    from mp_api.services.manual_mapping_service import MappingRow

    with path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames or "postal_code" not in reader.fieldnames:
            msg = "CSV must have a postal_code column"
            raise typer.BadParameter(msg)
        rows: list[MappingRow] = []
        for line_number, record in enumerate(reader, start=2):
            raw_id = (record.get("representative_id") or "").strip()
            try:
                representative_id = int(raw_id) if raw_id else None
            except ValueError as e:
                msg = f"Line {line_number}: representative_id {raw_id!r} is not an integer"
                raise typer.BadParameter(msg) from e
            rows.append(
                MappingRow(
                    postal_code=record["postal_code"] or "",
                    representative_id=representative_id,
                    district_name=record.get("district_name"),
                )
            )
    return rows


@mappings_app.command("import")
def import_mappings(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="CSV file of mappings")],
) -> None:
    """Import manual postal code mappings from a CSV file."""
    rows = read_mapping_csv(path)
    logger.info(f"Read {len(rows)} mapping rows from {path}")
    inserted = asyncio.run(_import_impl(rows))
    typer.echo(f"Imported {inserted} of {len(rows)} mappings")


async def _import_impl(rows: list[MappingRow]) -> int:
    """Async implementation of the import command."""
    from mp_api.core.config import get_settings
    from mp_api.core.database import Database
    from mp_api.services import manual_mapping_service

    settings = get_settings()
    database = Database(settings.database_url, schema=settings.database_schema)
    try:
        async with database.session() as session:
            return await manual_mapping_service.import_mappings(session, rows)
    finally:
        await database.dispose()
