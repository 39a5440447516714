"""
Storage adapter interface for the wedding site API.
Defines the contract that all content store backends must implement.
"""

from typing import Protocol, List, Dict, Any, Optional


# Collections used by the API
GUEST_STORIES = "guestStories"
GUESTBOOK_ENTRIES = "guestbookEntries"
PHOTOS = "photos"
VISITOR_LOGS = "visitorLogs"
RATE_LIMITS = "rateLimits"

RECORD_NOT_FOUND = "RECORD_NOT_FOUND"


class StorageAdapter(Protocol):
    """
    Protocol defining the interface for all content store adapters.

    This allows swapping between Firestore, SQLite and JSON files
    without changing the router or service code.

    NOTE:
    - Records are plain dicts. Every record returned by the adapter
      carries its store-assigned `id`.
    - Filters are equality-only, the same shape as the Firestore
      `where(field, "==", value)` queries the routes need.
    """

    def create_record(self, collection: str, data: Dict[str, Any]) -> str:
        """
        Persist a new record.

        Args:
            collection: Collection name (e.g. guestStories)
            data: Record fields (must not contain `id`)

        Returns:
            Generated record ID.
        """
        ...

    def get_record(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a record by ID.

        Returns:
            Dict with record fields plus `id`, or None if not found.
        """
        ...

    def list_records(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
    ) -> List[Dict[str, Any]]:
        """
        List records matching all equality filters, optionally ordered by a field.
        """
        ...

    def update_record(self, collection: str, record_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Overwrite only the provided keys on a record.

        Returns:
            The updated record.

        Raises:
            ValueError(RECORD_NOT_FOUND) if the record does not exist.
        """
        ...

    def delete_record(self, collection: str, record_id: str) -> None:
        """
        Delete a record.

        Raises:
            ValueError(RECORD_NOT_FOUND) if the record does not exist.
        """
        ...

    def ping(self) -> None:
        """Cheap connectivity check used by /readyz. Raises on failure."""
        ...


def matches(record: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
    """Equality match used by the file/SQL backends."""
    if not filters:
        return True
    return all(record.get(k) == v for k, v in filters.items())


def sort_records(
    records: List[Dict[str, Any]],
    order_by: Optional[str],
    descending: bool = True,
) -> List[Dict[str, Any]]:
    """
    Sort records by a field. Records missing the field sort last,
    regardless of direction.
    """
    if not order_by:
        return records
    present = [r for r in records if r.get(order_by) is not None]
    missing = [r for r in records if r.get(order_by) is None]
    present.sort(key=lambda r: r[order_by], reverse=descending)
    return present + missing
