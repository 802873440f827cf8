"""
JSON File Storage Implementation

DESIGN DECISION: Each named collection lives in its own JSON file,
`<data_dir>/<key>.json` (tax rates, users). Files are plain text so a
user can inspect or edit the rate table by hand.

File layout:
    {"key": "tax_rates", "saved_at": "<iso timestamp>", "records": [...]}

TRADEOFFS:
- Whole-file rewrites only (fine for a handful of records)
- No locking: a single process owns the files
- Each write goes to its own temp file that replaces the target, so a
  crash mid-write leaves the previous version intact

The implementation follows the abstract interface, so we can swap
to SQLite later without changing business logic.
"""

import json
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.models.audit import AuditEvent
from src.services.storage.interface import (
    AuditStorageInterface,
    InvalidKeyError,
    LoadResult,
    Record,
    RecordStorageInterface,
    SaveResult,
    StorageError,
)


KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class JsonFileStorage(RecordStorageInterface):
    """
    File-backed record storage, one JSON document per key.
    """

    def __init__(self, data_dir: Union[str, Path], suffix: str = ".json"):
        self._data_dir = Path(data_dir)
        self._suffix = suffix

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        """
        Resolve the file backing a key.

        Raises:
            InvalidKeyError: If the key could escape the data directory
        """
        if not KEY_PATTERN.match(key):
            raise InvalidKeyError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}{self._suffix}"

    def load(self, key: str) -> LoadResult:
        path = self.path_for(key)
        if not path.exists():
            return LoadResult.missing(key)

        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            return LoadResult.corrupt(key, f"{type(e).__name__}: {e}")

        if not isinstance(document, dict):
            return LoadResult.corrupt(key, "Top-level JSON value is not an object")

        records = document.get("records")
        if not isinstance(records, list) or not all(
            isinstance(record, dict) for record in records
        ):
            return LoadResult.corrupt(key, "'records' is not a list of objects")

        return LoadResult.loaded(key, records)

    def save(self, key: str, records: list[Record]) -> SaveResult:
        path = self.path_for(key)
        document = {
            "key": key,
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "records": records,
        }
        payload = json.dumps(document, indent=2, ensure_ascii=False)

        try:
            self._write(path, payload)
        except OSError as e:
            return SaveResult(key=key, ok=False, error=f"{type(e).__name__}: {e}")

        return SaveResult(key=key, ok=True)

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write(self, path: Path, payload: str) -> None:
        """Write via a unique temp file, then atomically replace the target."""
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f"{path.name}.",
            suffix=".tmp",
            delete=False,
        )
        tmp_path = Path(tmp.name)
        try:
            with tmp:
                tmp.write(payload)
            tmp_path.replace(path)
        finally:
            # Gone after a successful replace; left over after a failed one
            tmp_path.unlink(missing_ok=True)


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit log, one JSON event per line.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def append_event(self, event: AuditEvent) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(event.model_dump_json() + "\n")
        except OSError as e:
            raise StorageError(f"Failed to append audit event: {e}") from e
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        if not self._path.exists():
            return []

        try:
            lines = self._path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise StorageError(f"Failed to read audit log: {e}") from e

        events = []
        for line in reversed(lines):
            if len(events) >= limit:
                break
            parsed = self._parse_line(line)
            if parsed is not None:
                events.append(parsed)
        return events

    @staticmethod
    def _parse_line(line: str) -> Optional[AuditEvent]:
        # Skip blank or truncated lines rather than losing the whole log
        if not line.strip():
            return None
        try:
            return AuditEvent.model_validate_json(line)
        except ValueError:
            return None
