from .guestbook import GuestbookEntry
from .media import MediaItem
from .moderation import ALBUM, GUESTBOOK, STORIES, ModerationTarget, RejectionPolicy
from .story import GuestStory
from .visitor import VisitorLog

__all__ = [
    "GuestStory",
    "GuestbookEntry",
    "MediaItem",
    "VisitorLog",
    "ModerationTarget",
    "RejectionPolicy",
    "STORIES",
    "GUESTBOOK",
    "ALBUM",
]
