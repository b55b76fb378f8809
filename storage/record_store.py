"""Record Store - JSON document of captured token launches."""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ingestion.errors import RecordStoreError
from ingestion.events import TokenLaunchEvent

logger = logging.getLogger(__name__)


class JsonRecordStore:
    """
    Persists TokenLaunchEvents as one JSON array, keyed by signature.

    The first upsert for a signature appends the full record. Later
    upserts only fill in ``riskAssessment``; every other stored field
    keeps its originally captured value. A stored assessment is never
    cleared.

    The whole document is rewritten on each upsert, so load-merge-save
    runs under a single lock shared by all writers.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize the store.

        Args:
            path: Location of the JSON document (created on first write)
        """
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def upsert(self, event: TokenLaunchEvent) -> None:
        """
        Insert or update the record for ``event.signature``.

        Raises:
            RecordStoreError: If the document cannot be read or written
        """
        async with self._lock:
            await asyncio.to_thread(self._upsert_sync, event.to_dict())

    async def load(self) -> List[Dict[str, Any]]:
        """Return all stored records in insertion order."""
        async with self._lock:
            return await asyncio.to_thread(self._read)

    async def get(self, signature: str) -> Optional[TokenLaunchEvent]:
        """Return the stored event for a signature, if any."""
        for record in await self.load():
            if record.get("signature") == signature:
                return TokenLaunchEvent.from_dict(record)
        return None

    def _upsert_sync(self, incoming: Dict[str, Any]) -> None:
        records = self._read()
        signature = incoming["signature"]

        for record in records:
            if record.get("signature") != signature:
                continue
            if incoming.get("riskAssessment") is None:
                logger.debug(f"Record {signature[:16]}... unchanged")
                return
            record["riskAssessment"] = incoming["riskAssessment"]
            self._write(records)
            logger.info(f"Updated risk assessment for {signature[:16]}...")
            return

        records.append(incoming)
        self._write(records)
        logger.info(f"Stored new token record {signature[:16]}... ({len(records)} total)")

    def _read(self) -> List[Dict[str, Any]]:
        try:
            with open(self.path, encoding="utf-8") as f:
                content = f.read()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise RecordStoreError(f"Cannot read {self.path}: {e}") from e

        if not content.strip():
            return []

        try:
            records = json.loads(content)
        except json.JSONDecodeError as e:
            raise RecordStoreError(f"Corrupt records file {self.path}: {e}") from e

        if not isinstance(records, list):
            raise RecordStoreError(f"Records file {self.path} does not hold a JSON array")
        return records

    def _write(self, records: List[Dict[str, Any]]) -> None:
        """Rewrite the document via a temp file and atomic rename."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise RecordStoreError(f"Cannot write {self.path}: {e}") from e
