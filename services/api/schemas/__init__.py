"""
Pydantic schemas for API request validation.
"""
from typing import List, Optional

from pydantic import BaseModel, Field, StrictBool


# ============ Guest stories ============


class StoryCreate(BaseModel):
    """
    Story submission body.

    Required fields are checked after trimming by the service (so a blank
    string is rejected with the same message as a missing one).
    """
    guestName: Optional[str] = Field(None, description="Guest's name")
    storyTitle: Optional[str] = Field(None, description="Story title")
    storyContent: Optional[str] = Field(None, description="Story text")
    relationship: Optional[str] = Field(None, max_length=100, description="How the guest knows the couple")
    favoriteMemory: Optional[str] = Field(None, max_length=2000)
    wishForCouple: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = Field(None, description="Category id; derived from the text when omitted")
    photos: List[str] = Field(default_factory=list, description="Photo URLs (first 5 kept)")


class StatusUpdate(BaseModel):
    """Admin moderation body for stories and guestbook entries."""
    approved: StrictBool = Field(..., description="New approval state (JSON boolean)")
    featured: StrictBool = Field(False, description="Feature on the site (ignored unless approved)")


# ============ Guestbook ============


class GuestbookCreate(BaseModel):
    """Guestbook message. Name is optional and defaults to Anonymous."""
    name: Optional[str] = Field(None, description="Guest name")
    message: Optional[str] = Field(None, description="Message (1-500 characters)")


# ============ Album ============


class MediaModerate(BaseModel):
    """Admin moderation body for album media."""
    photoId: str = Field(..., min_length=1, description="Media record id")
    isApproved: StrictBool = Field(..., description="true approves, false deletes")
    featured: StrictBool = Field(False, description="Feature on the site (ignored unless approved)")


__all__ = [
    "StoryCreate",
    "StatusUpdate",
    "GuestbookCreate",
    "MediaModerate",
]
