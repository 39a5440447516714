"""
JSON file storage adapter for the wedding site API.
Simple file-based storage for quick demos and testing.
Not production-ready (no proper locking, not suitable for concurrent access).
"""
import json
import uuid
from typing import List, Dict, Any, Optional
from pathlib import Path

from ..base import RECORD_NOT_FOUND, matches, sort_records


class JsonAdapter:
    """
    JSON file-based storage adapter.
    Stores each collection in its own JSON file under the data directory.
    Uses atomic file operations for basic consistency.
    """

    def __init__(self, data_dir: str = "data"):
        """
        Initialize the JSON adapter.

        Args:
            data_dir: Directory to store JSON files
        """
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _file(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def _read_file(self, filepath: Path) -> List[Dict[str, Any]]:
        """Read and parse a JSON file."""
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return json.load(f)
        except (FileNotFoundError, json.JSONDecodeError):
            return []

    def _write_file(self, filepath: Path, data: List[Dict[str, Any]]) -> None:
        """Write data to a JSON file atomically."""
        # Write to temporary file first
        tmp_file = filepath.with_suffix(".tmp")
        with open(tmp_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)

        # Atomic rename
        tmp_file.replace(filepath)

    def create_record(self, collection: str, data: Dict[str, Any]) -> str:
        """Append a record and return its new id."""
        record_id = uuid.uuid4().hex
        rows = self._read_file(self._file(collection))
        rows.append({**data, "id": record_id})
        self._write_file(self._file(collection), rows)
        return record_id

    def get_record(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        rows = self._read_file(self._file(collection))
        return next((dict(r) for r in rows if r.get("id") == record_id), None)

    def list_records(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
    ) -> List[Dict[str, Any]]:
        rows = [dict(r) for r in self._read_file(self._file(collection)) if matches(r, filters)]
        return sort_records(rows, order_by, descending)

    def update_record(self, collection: str, record_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        rows = self._read_file(self._file(collection))
        row = next((r for r in rows if r.get("id") == record_id), None)
        if row is None:
            raise ValueError(RECORD_NOT_FOUND)

        # id is immutable
        row.update({k: v for k, v in updates.items() if k != "id"})
        self._write_file(self._file(collection), rows)
        return dict(row)

    def delete_record(self, collection: str, record_id: str) -> None:
        rows = self._read_file(self._file(collection))
        kept = [r for r in rows if r.get("id") != record_id]
        if len(kept) == len(rows):
            raise ValueError(RECORD_NOT_FOUND)
        self._write_file(self._file(collection), kept)

    def ping(self) -> None:
        if not self.data_dir.is_dir():
            raise RuntimeError(f"Data directory {self.data_dir} is missing")
