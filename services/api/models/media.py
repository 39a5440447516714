# services/api/models/media.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

ANONYMOUS_UPLOADER = "Anonymous Guest"


@dataclass
class MediaItem:
    """
    Domain model for an album photo or video (`photos` collection).

    `filename` is the blob key in the blob store (the record's mediaRef).
    """

    filename: str
    mimetype: str
    original_name: str = ""
    size: int = 0
    uploaded_by: str = ANONYMOUS_UPLOADER

    approved: bool = False
    featured: bool = False
    submitted_at: str = ""
    reviewed_at: Optional[str] = None

    id: Optional[str] = None

    @property
    def kind(self) -> str:
        return "video" if self.mimetype.startswith("video/") else "image"

    @classmethod
    def from_storage(cls, row: Dict[str, Any]) -> "MediaItem":
        return cls(
            id=row.get("id"),
            filename=row.get("filename") or row.get("filepath") or "",
            mimetype=row.get("mimetype") or "",
            original_name=row.get("originalName") or "",
            size=int(row.get("size") or 0),
            uploaded_by=row.get("uploadedBy") or ANONYMOUS_UPLOADER,
            approved=bool(row.get("approved", False)),
            featured=bool(row.get("featured", False)),
            submitted_at=row.get("submittedAt") or "",
            reviewed_at=row.get("reviewedAt"),
        )

    def to_storage(self) -> Dict[str, Any]:
        data = {
            "filename": self.filename,
            "filepath": self.filename,
            "mimetype": self.mimetype,
            "originalName": self.original_name,
            "size": self.size,
            "uploadedBy": self.uploaded_by,
            "submittedAt": self.submitted_at,
            "approved": self.approved,
            "featured": self.featured,
        }
        if self.reviewed_at:
            data["reviewedAt"] = self.reviewed_at
        return data

    def to_api(self, url: Optional[str] = None) -> Dict[str, Any]:
        return {"id": self.id, **self.to_storage(), "kind": self.kind, "url": url}
