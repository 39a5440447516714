"""
Guestbook endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
import logging

from adapters.base import RECORD_NOT_FOUND
from core.auth import Admin
from deps import Storage, limit_guestbook_posts
from models import GUESTBOOK
from models.services import GuestbookService, ModerationService
from schemas import GuestbookCreate, StatusUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/guestbook", tags=["guestbook"])


@router.get("", response_model=dict)
async def list_entries(
    storage: Storage,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """Approved guestbook entries, newest first."""
    try:
        return {"success": True, "data": GuestbookService.list_public(storage, limit=limit, offset=offset)}
    except Exception as e:
        logger.error(f"Error fetching guestbook entries: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch guestbook entries")


@router.post(
    "",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_guestbook_posts)],
)
async def sign_guestbook(body: GuestbookCreate, storage: Storage):
    """Sign the guestbook. The entry is pending until approved."""
    try:
        entry = GuestbookService.submit(storage, body.model_dump())
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating guestbook entry: {e}")
        raise HTTPException(status_code=500, detail="Failed to submit guestbook entry")

    return {
        "success": True,
        "data": {
            "id": entry.id,
            "message": "Thank you! Your message will appear after admin approval.",
            "entry": entry.to_api(),
        },
    }


@router.get("/admin/all", response_model=dict)
async def list_all_entries(storage: Storage, _admin: Admin):
    try:
        return {"success": True, "data": {"entries": GuestbookService.list_all(storage)}}
    except Exception as e:
        logger.error(f"Error fetching all guestbook entries: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch guestbook entries")


@router.patch("/admin/{entry_id}/status", response_model=dict)
async def update_entry_status(entry_id: str, body: StatusUpdate, storage: Storage, _admin: Admin):
    """Approve or hide a guestbook entry."""
    try:
        result = ModerationService.moderate(
            storage, GUESTBOOK, entry_id, approved=body.approved, featured=body.featured
        )
    except ValueError as e:
        if RECORD_NOT_FOUND in str(e):
            raise HTTPException(status_code=404, detail=f"Guestbook entry {entry_id} not found")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error moderating guestbook entry {entry_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update entry status")

    return {"success": True, "data": result}
