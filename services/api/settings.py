# services/api/settings.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field
import base64
from typing import List, Optional
from pathlib import Path

class Settings(BaseSettings):
    # Storage settings
    # Default to Firestore; override via .env (STORAGE_BACKEND=sqlite or json) for local dev
    storage_backend: str = "firestore"
    google_sa_json: str = ""
    google_sa_json_base64: str = ""
    gcp_project_id: str = ""
    firestore_database: str = "(default)"
    db_url: str = "sqlite:///data/wedding.db"
    data_dir: str = "data"

    # Blob storage (uploaded album media)
    blob_backend: str = "gcs"
    gcs_bucket_name: str = "the-poradas-uploads"
    local_blob_dir: str = "data/uploads"
    public_blob_base_url: str = "/uploads"
    signed_url_ttl_seconds: int = 900

    # Shared secret for admin routes, sent as "Authorization: Bearer <key>" or "X-Admin-Key".
    # Empty means every admin request is refused.
    admin_secret_key: str = ""

    # CORS settings
    allowed_origins: str = "http://localhost:3000,http://localhost:3001,http://localhost:8000"

    # Rate limiting
    # "memory" keeps counters in-process, "store" keeps them in the content store
    # so several instances share them.
    rate_limit_backend: str = "memory"
    guestbook_posts_per_hour: int = 5
    map_logs_per_day: int = 10
    visit_dedupe_hours: int = 24
    # Proxies in front of the API that append to X-Forwarded-For (Cloud Run / LB = 1).
    # The client IP is taken this many entries from the right; 0 ignores the header.
    trusted_proxy_hops: int = 1

    # IP geolocation for the visitor map
    geo_lookup_url: str = "http://ip-api.com/json"
    geo_timeout_seconds: float = 5.0

    # Album upload limits
    max_upload_files: int = 10
    max_upload_bytes: int = 100 * 1024 * 1024

    log_level: str = Field(default="INFO", description="Root log level")

    model_config = ConfigDict(
        # Always load .env from the same folder as this settings.py
        env_file=str(Path(__file__).resolve().parent / ".env"),
        extra="ignore",
    )

    def resolved_google_sa_json(self) -> str:
        """
        Return the service account JSON (path or inline JSON string).
        If GOOGLE_SA_JSON_BASE64 is set, decode it and return the JSON text.
        """
        if self.google_sa_json_base64:
            return base64.b64decode(self.google_sa_json_base64).decode("utf-8")
        return self.google_sa_json

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


_settings_instance: Optional[Settings] = None

def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings_instance
    _settings_instance = None
