"""Base class for government rate file importers.

Defines the contract that all importer modules must implement and the
shared run loop: download, locate data, parse and upsert line by line,
record provenance.

Key principles:
1. Each importer handles exactly ONE data source
2. Re-running an import is always safe (upserts by natural key)
3. A malformed line is counted and skipped, never fatal
4. An unreachable source fails the whole run before anything is written
"""

from __future__ import annotations

import asyncio
import logging
import time
import weakref
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Generic, TypeVar

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from taxscanner.config import ImportConfig
from taxscanner.db.repository import JurisdictionRepository
from taxscanner.errors import LayoutError, UpstreamFetchError
from taxscanner.pipeline.layout import FileLayout
from taxscanner.pipeline.types import ImportResult, ImportStatus

EntryT = TypeVar("EntryT")

# One lock per (event loop, source id): runs of the same source on a loop
# are serialized, and a lock is never shared across loops
_source_locks: weakref.WeakKeyDictionary[
    asyncio.AbstractEventLoop, defaultdict[str, asyncio.Lock]
] = weakref.WeakKeyDictionary()


def source_lock(source_id: str) -> asyncio.Lock:
    """Return the lock serializing runs of ``source_id`` on the running loop."""
    loop = asyncio.get_running_loop()
    locks = _source_locks.get(loop)
    if locks is None:
        locks = _source_locks[loop] = defaultdict(asyncio.Lock)
    return locks[source_id]


class BaseImporter(ABC, Generic[EntryT]):
    """Abstract base class for rate file importers.

    Subclasses set ``source_id`` and ``layout`` and implement:
    - source_url(): where the file is published
    - parse_line(): one raw line -> one entry (raise LineParseError if bad)
    - save_entry(): upsert one entry, returning True if a city was created
    """

    source_id: str
    layout: FileLayout

    def __init__(
        self,
        session: AsyncSession,
        config: ImportConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize importer.

        Args:
            session: Session the import writes through; committed once per run
            config: Download settings (URLs, User-Agent, timeout)
            client: Shared HTTP client; a short-lived one is opened when omitted
        """
        self.session = session
        self.repository = JurisdictionRepository(session)
        self.config = config or ImportConfig()
        self._client = client
        self.logger = logging.getLogger(f"{__name__}.{self.source_id}")

    @abstractmethod
    def source_url(self) -> str:
        """URL of the published rate file."""

    @abstractmethod
    def parse_line(self, line: str) -> EntryT:
        """Parse one data line.

        Raises:
            LineParseError: If the line is malformed
        """

    @abstractmethod
    async def save_entry(self, entry: EntryT) -> bool:
        """Upsert one entry; return True if its city row was created."""

    async def run(self) -> ImportResult:
        """Download the source file and import it.

        This is the public interface called by the API and the CLI.

        Raises:
            UpstreamFetchError: If the file cannot be downloaded
            LayoutError: If the file does not match the expected layout
        """
        lock = source_lock(self.source_id)
        if lock.locked():
            self.logger.info(f"Import of {self.source_id} already running, waiting")

        async with lock:
            self.logger.info(f"Starting import from {self.source_id}")
            text = await self.download()
            return await self.import_text(text)

    async def download(self) -> str:
        """Fetch the source file over HTTPS.

        Raises:
            UpstreamFetchError: On network errors, timeouts or HTTP errors
        """
        url = self.source_url()
        headers = {"User-Agent": self.config.user_agent}

        try:
            if self._client is not None:
                response = await self._client.get(
                    url, headers=headers, timeout=self.config.timeout_seconds
                )
            else:
                async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                    response = await client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.logger.error(f"Download failed for {self.source_id}: {e}")
            raise UpstreamFetchError(url, str(e) or type(e).__name__) from e

        self.logger.info(f"Downloaded {len(response.text)} characters from {url}")
        return response.text

    async def import_text(self, text: str) -> ImportResult:
        """Parse and upsert file content, then record provenance and commit."""
        start_time = time.time()
        lines = text.splitlines()
        result = ImportResult(source_id=self.source_id, status=ImportStatus.SUCCESS)

        try:
            data_start = self.layout.locate_data_start(lines, self.parse_line)
        except LayoutError as e:
            self.logger.error(f"Layout check failed for {self.source_id}: {e}")
            await self.repository.upsert_import_source(
                self.source_id, 0, ImportStatus.ERROR.value, str(e)
            )
            await self.session.commit()
            raise

        self.logger.info(
            f"Processing {len(lines) - data_start} lines of {self.source_id} data "
            f"(layout {self.layout.name}, data starts at line {data_start + 1})"
        )

        for index in range(data_start, len(lines)):
            line = lines[index].strip()
            if not line:
                continue

            try:
                entry = self.parse_line(line)
                async with self.session.begin_nested():
                    created = await self.save_entry(entry)
            except Exception as e:
                self.logger.warning(f"Error on line {index + 1}: {e} ({line!r})")
                result.errors += 1
                continue

            if created:
                result.imported += 1
            else:
                result.updated += 1

        if result.errors:
            result.status = ImportStatus.PARTIAL_SUCCESS
        result.message = (
            f"{result.imported} imported, {result.updated} updated, {result.errors} errors"
        )

        await self.repository.upsert_import_source(
            self.source_id,
            result.records_count,
            result.status.value,
            f"{result.errors} errors encountered during import" if result.errors else None,
        )
        await self.session.commit()

        result.duration_seconds = time.time() - start_time
        self.logger.info(f"Import of {self.source_id} completed: {result.message}")
        return result
