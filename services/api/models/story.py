# services/api/models/story.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.classifier import DEFAULT_CATEGORY

MAX_STORY_PHOTOS = 5


@dataclass
class GuestStory:
    """
    Domain model for a guest story.

    Stored in the `guestStories` collection with camelCase field names
    (the shape the frontend reads). New stories always start unapproved.
    """

    guest_name: str
    story_title: str
    story_content: str

    relationship: str = "Friend"
    favorite_memory: str = ""
    wish_for_couple: str = ""

    category: str = DEFAULT_CATEGORY
    tags: List[str] = field(default_factory=list)
    photos: List[str] = field(default_factory=list)
    likes: int = 0

    approved: bool = False
    featured: bool = False
    submitted_at: str = ""
    reviewed_at: Optional[str] = None

    id: Optional[str] = None

    # ------------ storage layer ------------

    @classmethod
    def from_storage(cls, row: Dict[str, Any]) -> "GuestStory":
        return cls(
            id=row.get("id"),
            guest_name=row.get("guestName") or "",
            story_title=row.get("storyTitle") or "",
            story_content=row.get("storyContent") or "",
            relationship=row.get("relationship") or "Friend",
            favorite_memory=row.get("favoriteMemory") or "",
            wish_for_couple=row.get("wishForCouple") or "",
            category=row.get("category") or DEFAULT_CATEGORY,
            tags=list(row.get("tags") or []),
            photos=list(row.get("photos") or []),
            likes=int(row.get("likes") or 0),
            approved=bool(row.get("approved", False)),
            featured=bool(row.get("featured", False)),
            submitted_at=row.get("submittedAt") or "",
            reviewed_at=row.get("reviewedAt"),
        )

    def to_storage(self) -> Dict[str, Any]:
        data = {
            "guestName": self.guest_name,
            "relationship": self.relationship,
            "storyTitle": self.story_title,
            "storyContent": self.story_content,
            "favoriteMemory": self.favorite_memory,
            "wishForCouple": self.wish_for_couple,
            "category": self.category,
            "photos": self.photos[:MAX_STORY_PHOTOS],
            "submittedAt": self.submitted_at,
            "approved": self.approved,
            "featured": self.featured,
            "likes": self.likes,
            "tags": self.tags,
        }
        if self.reviewed_at:
            data["reviewedAt"] = self.reviewed_at
        return data

    # ------------ API layer ------------

    def to_api(self) -> Dict[str, Any]:
        return {"id": self.id, **self.to_storage()}
