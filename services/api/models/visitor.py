# services/api/models/visitor.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class VisitorLog:
    """One logged visit for the visitor map (`visitorLogs` collection)."""

    ip_address: str
    latitude: float
    longitude: float
    city: str
    country: str
    timestamp: str = ""

    id: Optional[str] = None

    def validate(self) -> None:
        if not self.ip_address:
            raise ValueError("IP address is required.")
        if not self.city:
            raise ValueError("City is required.")
        if not self.country:
            raise ValueError("Country is required.")

    @classmethod
    def from_storage(cls, row: Dict[str, Any]) -> "VisitorLog":
        return cls(
            id=row.get("id"),
            ip_address=row.get("ip_address") or "",
            latitude=float(row.get("latitude") or 0.0),
            longitude=float(row.get("longitude") or 0.0),
            city=row.get("city") or "",
            country=row.get("country") or "",
            timestamp=row.get("timestamp") or "",
        )

    def to_storage(self) -> Dict[str, Any]:
        return {
            "ip_address": self.ip_address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "city": self.city,
            "country": self.country,
            "timestamp": self.timestamp,
        }

    def to_api(self) -> Dict[str, Any]:
        return {"id": self.id, **self.to_storage()}
