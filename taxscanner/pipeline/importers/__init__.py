"""Source-specific importers, keyed by the name used on the CLI and the API."""

from __future__ import annotations

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from taxscanner.config import ImportConfig
from taxscanner.pipeline.base_importer import BaseImporter
from taxscanner.pipeline.importers.illinois import IllinoisImporter
from taxscanner.pipeline.importers.texas import TexasImporter

IMPORTERS: dict[str, type[BaseImporter]] = {
    "texas": TexasImporter,
    "illinois": IllinoisImporter,
}


def get_importer(
    name: str,
    session: AsyncSession,
    config: ImportConfig | None = None,
    client: httpx.AsyncClient | None = None,
) -> BaseImporter:
    """Create the importer registered under name.

    Raises:
        KeyError: If no importer is registered under name
    """
    key = name.strip().lower()
    if key not in IMPORTERS:
        raise KeyError(f"Unknown import source: {name}. Available: {', '.join(IMPORTERS)}")
    return IMPORTERS[key](session, config=config, client=client)


__all__ = ["IMPORTERS", "IllinoisImporter", "TexasImporter", "get_importer"]
