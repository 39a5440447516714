# services/api/core/geo.py
from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from settings import get_settings

logger = logging.getLogger(__name__)

# Loopback addresses can't be geolocated; use a fixed public sample instead.
LOCAL_IPS = {"::1", "127.0.0.1", "testclient"}
SAMPLE_IP = "24.48.0.1"


@dataclass
class GeoLocation:
    lat: float
    lon: float
    city: str
    country: str

    @property
    def resolved(self) -> bool:
        return self.country not in ("Unknown", "Error")


UNKNOWN = GeoLocation(lat=0.0, lon=0.0, city="Unknown", country="Unknown")
FAILED = GeoLocation(lat=0.0, lon=0.0, city="Error", country="Error")


async def get_geo_location(ip: str) -> GeoLocation:
    """
    Look up an IP with ip-api.com.

    Returns UNKNOWN when the service answers with status=fail and FAILED on
    any transport/parse error; callers check `.resolved`.
    """
    settings = get_settings()
    effective_ip = SAMPLE_IP if ip in LOCAL_IPS else ip
    url = f"{settings.geo_lookup_url.rstrip('/')}/{effective_ip}"

    try:
        async with httpx.AsyncClient(timeout=settings.geo_timeout_seconds) as client:
            response = await client.get(
                url, params={"fields": "status,message,country,city,lat,lon"}
            )
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Geo lookup failed for {effective_ip}: {e}")
        return FAILED

    if data.get("status") == "fail":
        logger.warning(f"Geo lookup returned fail for {effective_ip}: {data.get('message')}")
        return UNKNOWN

    return GeoLocation(
        lat=float(data.get("lat") or 0.0),
        lon=float(data.get("lon") or 0.0),
        city=data.get("city") or "Unknown",
        country=data.get("country") or "Unknown",
    )
