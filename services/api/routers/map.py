"""
Visitor map endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
import logging

from core import geo
from core.rate_limit import client_ip
from deps import AppSettings, Storage, limit_map_logs
from models.services import VisitorService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/map", tags=["map"])


@router.get("/locations", response_model=dict)
async def list_locations(storage: Storage):
    """One marker per distinct city/country, from the most recent visit there."""
    try:
        return {"success": True, "data": {"locations": VisitorService.locations(storage)}}
    except Exception as e:
        logger.error(f"Error fetching visitor locations: {e}")
        raise HTTPException(status_code=500, detail="Server error fetching locations.")


@router.post(
    "/log-visit",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_map_logs)],
)
async def log_visit(request: Request, storage: Storage, settings: AppSettings):
    """
    Record where a visitor is coming from.

    A visitor already logged inside the dedupe window gets 200 and nothing
    is written; the geo lookup is skipped too.
    """
    ip = client_ip(request, settings.trusted_proxy_hops)

    try:
        if VisitorService.has_recent_visit(storage, ip, settings.visit_dedupe_hours):
            return JSONResponse(
                status_code=status.HTTP_200_OK,
                content={"success": True, "data": {"message": "Visit already logged recently."}},
            )
    except Exception as e:
        logger.error(f"Error checking recent visits for {ip}: {e}")
        raise HTTPException(status_code=500, detail="Server error logging visit.")

    location = await geo.get_geo_location(ip)
    if not location.resolved:
        raise HTTPException(status_code=500, detail="Could not determine location.")

    try:
        log = VisitorService.log_visit(storage, ip, location)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error saving visit for {ip}: {e}")
        raise HTTPException(status_code=500, detail="Server error logging visit.")

    return {"success": True, "data": {"message": "Visit logged.", "visit": log.to_api()}}
