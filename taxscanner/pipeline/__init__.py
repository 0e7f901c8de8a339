"""Import pipeline for government sales-tax rate files.

Each source is downloaded, checked against its file layout and upserted
line by line; malformed lines are counted and skipped.
"""

from taxscanner.pipeline.base_importer import BaseImporter
from taxscanner.pipeline.importers import IMPORTERS, get_importer
from taxscanner.pipeline.status import DataStatus, get_data_status, list_data_status
from taxscanner.pipeline.types import ImportResult, ImportStatus

__all__ = [
    "BaseImporter",
    "DataStatus",
    "IMPORTERS",
    "ImportResult",
    "ImportStatus",
    "get_data_status",
    "get_importer",
    "list_data_status",
]
