# services/api/models/guestbook.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

ANONYMOUS = "Anonymous"


@dataclass
class GuestbookEntry:
    """
    Domain model for a guestbook message (`guestbookEntries` collection).
    """

    message: str
    name: str = ANONYMOUS

    approved: bool = False
    featured: bool = False
    submitted_at: str = ""
    reviewed_at: Optional[str] = None

    id: Optional[str] = None

    @classmethod
    def from_storage(cls, row: Dict[str, Any]) -> "GuestbookEntry":
        return cls(
            id=row.get("id"),
            name=row.get("name") or ANONYMOUS,
            message=row.get("message") or "",
            approved=bool(row.get("approved", False)),
            featured=bool(row.get("featured", False)),
            submitted_at=row.get("submittedAt") or "",
            reviewed_at=row.get("reviewedAt"),
        )

    def to_storage(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "message": self.message,
            "submittedAt": self.submitted_at,
            "approved": self.approved,
            "featured": self.featured,
        }
        if self.reviewed_at:
            data["reviewedAt"] = self.reviewed_at
        return data

    def to_api(self) -> Dict[str, Any]:
        return {"id": self.id, **self.to_storage()}
