"""
Rate Table Repository

Loads the rate table through the persistence gateway. When nothing usable
is stored, the default table is materialized and written back so the
data file exists for hand editing afterwards.
"""

from typing import Optional

from pydantic import ValidationError

from src.audit import AuditLogger
from src.models.tax import RateTable, default_rate_table
from src.services.storage import LoadStatus, RecordStorageInterface, SaveResult


class RateTableRepository:
    """Reads and writes the rate table collection."""

    def __init__(
        self,
        storage: RecordStorageInterface,
        key: str = "tax_rates",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._key = key
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> RateTable:
        """
        Load the stored rate table, or the default one.

        A stored table that parses but is malformed (gaps, jumps) is still
        returned; its issues are audited as a warning.
        """
        result = self._storage.load(self._key)

        if result.status == LoadStatus.MISSING:
            return self._materialize_default("no stored rate table")

        if result.status == LoadStatus.CORRUPT:
            self._audit_logger.log_storage_load_failed(self._key, result.error or "")
            return self._materialize_default("stored rate table unreadable")

        try:
            table = RateTable.from_records(result.records or [])
        except ValidationError as e:
            self._audit_logger.log_storage_load_failed(self._key, str(e))
            return self._materialize_default("stored rate table invalid")

        if not table.brackets:
            return self._materialize_default("stored rate table empty")

        issues = table.partition_issues() + table.continuity_issues()
        if issues:
            self._audit_logger.log_rate_table_invalid(self._key, issues)

        self._audit_logger.log_rate_table_loaded(self._key, len(table.brackets))
        return table

    def save(self, table: RateTable) -> SaveResult:
        """Persist a table; failures are audited, not raised."""
        result = self._storage.save(self._key, table.to_records())
        if not result.ok:
            self._audit_logger.log_storage_save_failed(self._key, result.error or "")
        return result

    def _materialize_default(self, reason: str) -> RateTable:
        table = default_rate_table()
        self._audit_logger.log_rate_table_defaulted(self._key, reason)
        self.save(table)
        return table
