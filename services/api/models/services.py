# services/api/models/services.py

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional
from uuid import uuid4

from adapters.base import (
    GUEST_STORIES,
    GUESTBOOK_ENTRIES,
    PHOTOS,
    RECORD_NOT_FOUND,
    VISITOR_LOGS,
)
from core.blob_store import file_extension, sanitize_filename, validate_file_type
from core.classifier import STORY_CATEGORIES, categorize, category_facets, extract_tags
from core.clock import hours_ago, parse_iso, utc_iso
from core.validation import (
    clean_text,
    ensure_max_length,
    escape_html,
    paginate,
    require_fields,
)
from core.geo import GeoLocation
from fastapi import HTTPException

from .guestbook import ANONYMOUS, GuestbookEntry
from .media import ANONYMOUS_UPLOADER, MediaItem
from .moderation import ModerationTarget, RejectionPolicy
from .story import GuestStory
from .visitor import VisitorLog

logger = logging.getLogger(__name__)

ORDER_FIELD = "submittedAt"
STORY_CATEGORY_IDS = {category for category, _ in STORY_CATEGORIES}

MAX_NAME_LEN = 100
MAX_TITLE_LEN = 200
MAX_STORY_LEN = 5000
MAX_MESSAGE_LEN = 500


class StoryService:
    """
    Guest stories: submission, public reads and admin listing.
    """

    @staticmethod
    def submit(storage, payload: Dict[str, Any]) -> GuestStory:
        require_fields(
            payload,
            ("guestName", "storyTitle", "storyContent"),
            "Guest name, story title, and content are required",
        )

        guest_name = clean_text(payload.get("guestName"))
        story_title = clean_text(payload.get("storyTitle"))
        story_content = clean_text(payload.get("storyContent"))
        favorite_memory = clean_text(payload.get("favoriteMemory"))

        ensure_max_length(guest_name, MAX_NAME_LEN, "Guest name")
        ensure_max_length(story_title, MAX_TITLE_LEN, "Story title")
        ensure_max_length(story_content, MAX_STORY_LEN, "Story content")

        category = clean_text(payload.get("category"))
        if category and category not in STORY_CATEGORY_IDS:
            raise HTTPException(status_code=400, detail=f"Unknown category '{category}'")

        story = GuestStory(
            guest_name=guest_name,
            story_title=story_title,
            story_content=story_content,
            relationship=clean_text(payload.get("relationship")) or "Friend",
            favorite_memory=favorite_memory,
            wish_for_couple=clean_text(payload.get("wishForCouple")),
            category=category or categorize((story_content, favorite_memory)),
            tags=extract_tags((story_content, favorite_memory)),
            photos=[p for p in (payload.get("photos") or []) if p],
            submitted_at=utc_iso(),
            approved=False,
            featured=False,
        )
        story.id = storage.create_record(GUEST_STORIES, story.to_storage())
        logger.info(f"Story {story.id} submitted (category={story.category})")
        return story

    @staticmethod
    def categories(storage) -> List[Dict[str, Any]]:
        approved = storage.list_records(GUEST_STORIES, filters={"approved": True})
        return category_facets(approved)

    @staticmethod
    def list_public(
        storage,
        category: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Dict[str, Any]:
        filters: Dict[str, Any] = {"approved": True}
        if category and category != "all":
            filters["category"] = category

        rows = storage.list_records(GUEST_STORIES, filters=filters, order_by=ORDER_FIELD)
        page = paginate([GuestStory.from_storage(r).to_api() for r in rows], limit, offset)
        return {
            "stories": page["items"],
            "total": page["total"],
            "hasMore": page["hasMore"],
            "categories": StoryService.categories(storage),
        }

    @staticmethod
    def list_featured(storage) -> List[Dict[str, Any]]:
        rows = storage.list_records(
            GUEST_STORIES,
            filters={"approved": True, "featured": True},
            order_by=ORDER_FIELD,
        )
        return [GuestStory.from_storage(r).to_api() for r in rows]

    @staticmethod
    def list_all(storage) -> List[Dict[str, Any]]:
        rows = storage.list_records(GUEST_STORIES, order_by=ORDER_FIELD)
        return [GuestStory.from_storage(r).to_api() for r in rows]


class GuestbookService:
    """
    Guestbook messages. Same approval gate as stories.
    """

    @staticmethod
    def submit(storage, payload: Dict[str, Any]) -> GuestbookEntry:
        require_fields(payload, ("message",), "A message is required to sign the guestbook.")

        name = clean_text(payload.get("name"))
        message = clean_text(payload.get("message"))
        ensure_max_length(name, MAX_NAME_LEN, "Name")
        ensure_max_length(message, MAX_MESSAGE_LEN, "Message")

        entry = GuestbookEntry(
            name=escape_html(name) if name else ANONYMOUS,
            message=escape_html(message),
            submitted_at=utc_iso(),
            approved=False,
            featured=False,
        )
        entry.id = storage.create_record(GUESTBOOK_ENTRIES, entry.to_storage())
        logger.info(f"Guestbook entry {entry.id} submitted")
        return entry

    @staticmethod
    def list_public(storage, limit: int = 20, offset: int = 0) -> Dict[str, Any]:
        rows = storage.list_records(
            GUESTBOOK_ENTRIES, filters={"approved": True}, order_by=ORDER_FIELD
        )
        page = paginate([GuestbookEntry.from_storage(r).to_api() for r in rows], limit, offset)
        return {"entries": page["items"], "total": page["total"], "hasMore": page["hasMore"]}

    @staticmethod
    def list_all(storage) -> List[Dict[str, Any]]:
        rows = storage.list_records(GUESTBOOK_ENTRIES, order_by=ORDER_FIELD)
        return [GuestbookEntry.from_storage(r).to_api() for r in rows]


def _media_key(filename: str, content_type: str) -> str:
    prefix = "vid" if content_type.startswith("video/") else "img"
    suffix = f"{int(time.time() * 1000)}-{uuid4().hex[:9]}"
    return f"album/{prefix}-{suffix}{file_extension(sanitize_filename(filename))}"


class AlbumService:
    """
    Album uploads. Each file goes to the blob store first, then its record
    is written to the content store as pending.
    """

    @staticmethod
    def store_upload(
        storage,
        blobs,
        *,
        filename: str,
        content_type: str,
        data: bytes,
        uploaded_by: Optional[str] = None,
        max_bytes: int,
    ) -> MediaItem:
        """
        Raises:
            ValueError: file rejected (type, size, empty); nothing was written
        """
        validate_file_type(filename, content_type)
        if not data:
            raise ValueError("File is empty")
        if len(data) > max_bytes:
            raise ValueError(f"File exceeds {max_bytes} bytes")

        key = _media_key(filename, content_type)
        blobs.upload(key, data, content_type)

        item = MediaItem(
            filename=key,
            mimetype=content_type,
            original_name=filename,
            size=len(data),
            uploaded_by=clean_text(uploaded_by) or ANONYMOUS_UPLOADER,
            submitted_at=utc_iso(),
            approved=False,
            featured=False,
        )
        try:
            item.id = storage.create_record(PHOTOS, item.to_storage())
        except Exception:
            # don't leave an orphaned blob behind a failed write
            logger.error(f"Record write failed for {key}; removing uploaded blob")
            blobs.delete(key)
            raise
        logger.info(f"Media {item.id} uploaded as {key}")
        return item

    @staticmethod
    def _with_urls(blobs, rows: List[Dict[str, Any]], ttl: int) -> List[Dict[str, Any]]:
        out = []
        for row in rows:
            item = MediaItem.from_storage(row)
            out.append(item.to_api(url=blobs.signed_url(item.filename, ttl)))
        return out

    @staticmethod
    def list_public(storage, blobs, limit: int = 20, offset: int = 0, url_ttl: int = 900) -> Dict[str, Any]:
        rows = storage.list_records(PHOTOS, filters={"approved": True}, order_by=ORDER_FIELD)
        page = paginate(rows, limit, offset)
        return {
            "media": AlbumService._with_urls(blobs, page["items"], url_ttl),
            "total": page["total"],
            "hasMore": page["hasMore"],
        }

    @staticmethod
    def list_all(storage, blobs, url_ttl: int = 900) -> List[Dict[str, Any]]:
        rows = storage.list_records(PHOTOS, order_by=ORDER_FIELD)
        return AlbumService._with_urls(blobs, rows, url_ttl)


class ModerationService:
    """
    Approve / reject / feature a submitted record.

    Rejection follows the target's policy: HIDE keeps the record unapproved,
    DELETE removes the record and its blob.
    """

    @staticmethod
    def moderate(
        storage,
        target: ModerationTarget,
        record_id: str,
        approved: bool,
        featured: bool = False,
        blobs=None,
    ) -> Dict[str, Any]:
        """
        Raises:
            ValueError(RECORD_NOT_FOUND): no record with that id
        """
        record = storage.get_record(target.collection, record_id)
        if record is None:
            raise ValueError(RECORD_NOT_FOUND)

        # featured implies approved
        effective_featured = bool(approved and featured)

        if not approved and target.rejection is RejectionPolicy.DELETE:
            storage.delete_record(target.collection, record_id)
            key = record.get("filename") or record.get("filepath")
            if key and blobs is not None:
                try:
                    blobs.delete(key)
                except Exception as e:
                    # record is already gone; an orphaned blob is logged for cleanup
                    logger.warning(f"Failed to delete blob {key} for rejected {record_id}: {e}")
            logger.info(f"{target.noun} {record_id} rejected and deleted")
            return {
                "message": f"{target.noun} rejected and deleted",
                target.id_field: record_id,
                "approved": False,
                "featured": False,
                "deleted": True,
            }

        storage.update_record(
            target.collection,
            record_id,
            {"approved": approved, "featured": effective_featured, "reviewedAt": utc_iso()},
        )
        verb = "approved" if approved else "rejected"
        logger.info(f"{target.noun} {record_id} {verb} (featured={effective_featured})")
        return {
            "message": f"{target.noun} {verb} successfully",
            target.id_field: record_id,
            "approved": approved,
            "featured": effective_featured,
            "deleted": False,
        }

    @staticmethod
    def queue(storage, blobs=None, url_ttl: int = 900) -> Dict[str, Any]:
        """Every record still waiting for review, by type, newest first."""
        pending = {"approved": False}
        stories = storage.list_records(GUEST_STORIES, filters=pending, order_by=ORDER_FIELD)
        entries = storage.list_records(GUESTBOOK_ENTRIES, filters=pending, order_by=ORDER_FIELD)
        media = storage.list_records(PHOTOS, filters=pending, order_by=ORDER_FIELD)

        media_out = (
            AlbumService._with_urls(blobs, media, url_ttl)
            if blobs is not None
            else [MediaItem.from_storage(r).to_api() for r in media]
        )
        counts = {"stories": len(stories), "guestbook": len(entries), "media": len(media)}
        return {
            "stories": [GuestStory.from_storage(r).to_api() for r in stories],
            "guestbook": [GuestbookEntry.from_storage(r).to_api() for r in entries],
            "media": media_out,
            "counts": counts,
            "total": sum(counts.values()),
        }


class VisitorService:
    """
    Visitor map: one log per IP per dedupe window, locations deduplicated by city.
    """

    @staticmethod
    def locations(storage) -> List[Dict[str, Any]]:
        logs = storage.list_records(VISITOR_LOGS, order_by="timestamp")
        unique: Dict[str, Dict[str, Any]] = {}
        for row in logs:
            log = VisitorLog.from_storage(row)
            key = f"{log.city}|{log.country}"
            if key not in unique:
                unique[key] = {
                    "city": log.city,
                    "country": log.country,
                    "lat": log.latitude,
                    "lon": log.longitude,
                }
        return list(unique.values())

    @staticmethod
    def has_recent_visit(storage, ip: str, window_hours: float) -> bool:
        cutoff = hours_ago(window_hours)
        for row in storage.list_records(VISITOR_LOGS, filters={"ip_address": ip}):
            ts = parse_iso(row.get("timestamp"))
            if ts is not None and ts >= cutoff:
                return True
        return False

    @staticmethod
    def log_visit(storage, ip: str, geo: GeoLocation) -> VisitorLog:
        log = VisitorLog(
            ip_address=ip,
            latitude=geo.lat,
            longitude=geo.lon,
            city=geo.city,
            country=geo.country,
            timestamp=utc_iso(),
        )
        log.validate()
        log.id = storage.create_record(VISITOR_LOGS, log.to_storage())
        logger.info(f"Logged visit {log.id} from {geo.city}, {geo.country}")
        return log
