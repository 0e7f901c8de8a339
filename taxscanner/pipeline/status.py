"""Data freshness reporting for import sources."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from taxscanner.db.models import ImportSourceModel
from taxscanner.db.repository import JurisdictionRepository
from taxscanner.pipeline.types import ImportStatus

DEFAULT_SOURCE = "texas_comptroller"


@dataclass(frozen=True)
class DataStatus:
    """When a source was last imported and how that went."""

    source: str
    status: str
    record_count: int = 0
    last_updated: datetime | None = None
    error_message: str | None = None

    @classmethod
    def from_model(cls, model: ImportSourceModel) -> DataStatus:
        return cls(
            source=model.source_id,
            status=model.status,
            record_count=model.records_count,
            last_updated=model.last_updated,
            error_message=model.error_message,
        )


async def get_data_status(
    repository: JurisdictionRepository, source_id: str = DEFAULT_SOURCE
) -> DataStatus:
    """Status of one source; a source never imported reports ``no_data``."""
    model = await repository.get_import_source(source_id)
    if model is None:
        return DataStatus(source=source_id, status=ImportStatus.NO_DATA.value)
    return DataStatus.from_model(model)


async def list_data_status(repository: JurisdictionRepository) -> list[DataStatus]:
    return [DataStatus.from_model(model) for model in await repository.list_import_sources()]
