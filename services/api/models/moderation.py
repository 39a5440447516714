# services/api/models/moderation.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from adapters.base import GUEST_STORIES, GUESTBOOK_ENTRIES, PHOTOS


class RejectionPolicy(str, Enum):
    """What rejecting a record does. Chosen per record type."""

    HIDE = "hide"      # keep the record, approved=false
    DELETE = "delete"  # remove the record and its blob


@dataclass(frozen=True)
class ModerationTarget:
    """Per-type moderation settings."""

    collection: str
    noun: str        # used in confirmation messages
    id_field: str    # key naming the id in responses
    rejection: RejectionPolicy


STORIES = ModerationTarget(GUEST_STORIES, "Story", "storyId", RejectionPolicy.HIDE)
GUESTBOOK = ModerationTarget(GUESTBOOK_ENTRIES, "Entry", "entryId", RejectionPolicy.HIDE)
ALBUM = ModerationTarget(PHOTOS, "Media", "photoId", RejectionPolicy.DELETE)
