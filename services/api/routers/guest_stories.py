"""
Guest story endpoints: submission, public listing and admin moderation.
"""
from fastapi import APIRouter, HTTPException, Query, status
from typing import Optional
import logging

from adapters.base import RECORD_NOT_FOUND
from core.auth import Admin
from deps import Storage
from models import STORIES
from models.services import ModerationService, StoryService
from schemas import StatusUpdate, StoryCreate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/guest-stories", tags=["guest-stories"])


@router.get("", response_model=dict)
async def list_stories(
    storage: Storage,
    category: Optional[str] = Query(None, description="Category id, or 'all'"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """Approved stories, newest first, with category facets."""
    try:
        data = StoryService.list_public(storage, category=category, limit=limit, offset=offset)
        return {"success": True, "data": data}
    except Exception as e:
        logger.error(f"Error fetching stories: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch stories")


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
async def submit_story(body: StoryCreate, storage: Storage):
    """Submit a story. It stays hidden until an admin approves it."""
    try:
        story = StoryService.submit(storage, body.model_dump())
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error saving story: {e}")
        raise HTTPException(status_code=500, detail="Failed to submit story")

    return {
        "success": True,
        "data": {
            "id": story.id,
            "message": "Your story has been submitted! It will appear after admin approval.",
            "story": story.to_api(),
        },
    }


@router.get("/categories", response_model=dict)
async def list_categories(storage: Storage):
    """Category facets over all approved stories."""
    try:
        return {"success": True, "data": {"categories": StoryService.categories(storage)}}
    except Exception as e:
        logger.error(f"Error fetching story categories: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.get("/featured", response_model=dict)
async def list_featured(storage: Storage):
    """Approved and featured stories only."""
    try:
        return {"success": True, "data": {"stories": StoryService.list_featured(storage)}}
    except Exception as e:
        logger.error(f"Error fetching featured stories: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch featured stories")


@router.get("/admin/all", response_model=dict)
async def list_all_stories(storage: Storage, _admin: Admin):
    """Every story regardless of approval state."""
    try:
        return {"success": True, "data": {"stories": StoryService.list_all(storage)}}
    except Exception as e:
        logger.error(f"Error fetching all stories: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch stories")


@router.patch("/admin/{story_id}/status", response_model=dict)
async def update_story_status(story_id: str, body: StatusUpdate, storage: Storage, _admin: Admin):
    """
    Approve or reject a story. Rejected stories are hidden, not deleted,
    and always lose their featured flag.
    """
    try:
        result = ModerationService.moderate(
            storage, STORIES, story_id, approved=body.approved, featured=body.featured
        )
    except ValueError as e:
        if RECORD_NOT_FOUND in str(e):
            raise HTTPException(status_code=404, detail=f"Story {story_id} not found")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error moderating story {story_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update story status")

    return {"success": True, "data": result}
