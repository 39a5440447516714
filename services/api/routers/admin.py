"""
Cross-type admin views.
"""
from fastapi import APIRouter, HTTPException
import logging

from core.auth import Admin
from deps import AppSettings, Blobs, Storage
from models.services import ModerationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/queue", response_model=dict)
async def moderation_queue(storage: Storage, blobs: Blobs, settings: AppSettings, _admin: Admin):
    """Everything awaiting review: stories, guestbook entries and media."""
    try:
        data = ModerationService.queue(storage, blobs, url_ttl=settings.signed_url_ttl_seconds)
        return {"success": True, "data": data}
    except Exception as e:
        logger.error(f"Error building moderation queue: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch moderation queue")
