"""
Photo album endpoints: multi-file upload, public gallery, moderation.
"""
from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import JSONResponse
from typing import List, Optional
import logging

from adapters.base import RECORD_NOT_FOUND
from core.auth import Admin
from deps import AppSettings, Blobs, Storage
from models import ALBUM
from models.services import AlbumService, ModerationService
from schemas import MediaModerate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/album", tags=["album"])


@router.get("", response_model=dict)
async def list_album(
    storage: Storage,
    blobs: Blobs,
    settings: AppSettings,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """Approved media for the public gallery, newest first."""
    try:
        data = AlbumService.list_public(
            storage, blobs, limit=limit, offset=offset, url_ttl=settings.signed_url_ttl_seconds
        )
        return {"success": True, "data": data}
    except Exception as e:
        logger.error(f"Error fetching album media: {e}")
        raise HTTPException(status_code=500, detail="Server error fetching media.")


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_media(
    storage: Storage,
    blobs: Blobs,
    settings: AppSettings,
    media: Optional[List[UploadFile]] = File(None, description="Photos/videos (form field 'media')"),
    uploadedBy: Optional[str] = Form(None),
):
    """
    Upload one or more files. Every file is stored as pending review.

    - 201: every file stored
    - 207: some files rejected, some stored
    - 400: no files, too many files, or every file rejected
    """
    files = [f for f in (media or []) if f.filename]
    if not files:
        raise HTTPException(status_code=400, detail="Please upload one or more files.")
    if len(files) > settings.max_upload_files:
        raise HTTPException(
            status_code=400,
            detail=f"You can upload at most {settings.max_upload_files} files at once.",
        )

    uploaded = []
    errors = []
    max_bytes = settings.max_upload_bytes
    for f in files:
        if f.size is not None and f.size > max_bytes:
            errors.append({"originalname": f.filename, "message": f"File exceeds {max_bytes} bytes"})
            continue
        # one byte over the limit is enough for store_upload to reject it
        data = await f.read(max_bytes + 1)
        content_type = f.content_type or "application/octet-stream"
        try:
            item = AlbumService.store_upload(
                storage,
                blobs,
                filename=f.filename,
                content_type=content_type,
                data=data,
                uploaded_by=uploadedBy,
                max_bytes=max_bytes,
            )
            uploaded.append(item.to_api())
        except ValueError as e:
            errors.append({"originalname": f.filename, "message": str(e)})
        except Exception as e:
            logger.error(f"Upload of {f.filename} failed: {e}")
            raise HTTPException(status_code=500, detail="A server error occurred during file upload.")

    if errors:
        logger.warning(f"Album upload: {len(uploaded)} stored, {len(errors)} rejected")
        code = status.HTTP_207_MULTI_STATUS if uploaded else status.HTTP_400_BAD_REQUEST
        return JSONResponse(
            status_code=code,
            content={
                "success": bool(uploaded),
                "error": {"message": "Some files were processed with errors."},
                "data": {"uploadedFiles": uploaded, "errors": errors},
            },
        )

    return {
        "success": True,
        "data": {
            "message": "All files uploaded successfully and are pending review.",
            "files": uploaded,
        },
    }


@router.get("/all", response_model=dict)
async def list_all_media(storage: Storage, blobs: Blobs, settings: AppSettings, _admin: Admin):
    """All media including pending, for the admin dashboard."""
    try:
        media = AlbumService.list_all(storage, blobs, url_ttl=settings.signed_url_ttl_seconds)
        return {"success": True, "data": {"media": media}}
    except Exception as e:
        logger.error(f"Error fetching all album media: {e}")
        raise HTTPException(status_code=500, detail="Server error fetching all media.")


@router.post("/moderate", response_model=dict)
async def moderate_media(body: MediaModerate, storage: Storage, blobs: Blobs, _admin: Admin):
    """Approve media, or reject it (deletes the record and the stored file)."""
    try:
        result = ModerationService.moderate(
            storage,
            ALBUM,
            body.photoId,
            approved=body.isApproved,
            featured=body.featured,
            blobs=blobs,
        )
    except ValueError as e:
        if RECORD_NOT_FOUND in str(e):
            raise HTTPException(status_code=404, detail="Photo not found.")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error during moderation of {body.photoId}: {e}")
        raise HTTPException(status_code=500, detail="Server error during moderation.")

    return {"success": True, "data": result}
