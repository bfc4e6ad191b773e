"""JSON-file-backed record tables."""

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

import structlog

logger = structlog.get_logger()


class RecordStore(Protocol):
    """Named key-value tables, read and written whole."""

    def exists(self, table: str) -> bool: ...

    def read(self, table: str, default: dict | None = None) -> dict[str, Any]: ...

    def write(self, table: str, records: dict[str, Any]) -> bool: ...


class JsonFileStore:
    """One JSON document per table under a data directory.

    Not transactional and not locked: two concurrent
    read-modify-write cycles on the same table race, and
    the last writer wins.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self._dir = Path(data_dir)

    def path_for(self, table: str) -> Path:
        return self._dir / f"{table}.json"

    def exists(self, table: str) -> bool:
        return self.path_for(table).exists()

    def read(self, table: str, default: dict | None = None) -> dict[str, Any]:
        """Return the table, or a copy of ``default`` if missing or corrupt."""
        fallback = copy.deepcopy(default) if default is not None else {}
        path = self.path_for(table)
        if not path.exists():
            return fallback
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.error("table_read_failed", table=table, path=str(path), error=str(e))
            return fallback
        if not isinstance(data, dict):
            logger.error("table_not_an_object", table=table, path=str(path))
            return fallback
        return data

    def write(self, table: str, records: dict[str, Any]) -> bool:
        """Replace the table on disk. Returns False on failure.

        The document goes to a temporary file in the same
        directory first and is then renamed over the table, so
        a concurrent read sees either the old or the new table.
        """
        path = self.path_for(table)
        tmp_name: str | None = None
        try:
            text = json.dumps(records, indent=2, ensure_ascii=False)
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{table}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                f.write(text)
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("table_write_failed", table=table, path=str(path), error=str(e))
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            return False
        return True
