"""
Shared fixtures: an app wired to a JSON store in tmp_path, local blob
storage and in-memory rate counters.
"""
import os
from datetime import datetime, timedelta, timezone
import sys

import pytest

# main.py reads settings at import time; keep it off Firestore/GCS.
os.environ.setdefault("STORAGE_BACKEND", "json")
os.environ.setdefault("BLOB_BACKEND", "local")
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

import deps
from adapters.base import GUEST_STORIES, GUESTBOOK_ENTRIES, PHOTOS
from adapters.json import JsonAdapter
from core.blob_store import LocalBlobStore
from core.clock import utc_iso
from core.rate_limit import TTLCacheRateStore
from settings import Settings, get_settings

ADMIN_KEY = "test-secret"


@pytest.fixture
def storage(tmp_path):
    return JsonAdapter(data_dir=str(tmp_path / "data"))


@pytest.fixture
def blobs(tmp_path):
    return LocalBlobStore(str(tmp_path / "uploads"), "/uploads")


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        storage_backend="json",
        data_dir=str(tmp_path / "data"),
        blob_backend="local",
        local_blob_dir=str(tmp_path / "uploads"),
        admin_secret_key=ADMIN_KEY,
        rate_limit_backend="memory",
    )


@pytest.fixture
def client(storage, blobs, test_settings):
    from main import app

    app.dependency_overrides[deps.get_storage_adapter] = lambda: storage
    app.dependency_overrides[deps.get_blob_store] = lambda: blobs
    rate_store = TTLCacheRateStore()
    app.dependency_overrides[deps.get_rate_store] = lambda: rate_store
    app.dependency_overrides[get_settings] = lambda: test_settings

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_KEY}"}


def _seconds_apart(index: int) -> str:
    base = datetime(2025, 6, 14, 12, 0, 0, tzinfo=timezone.utc)
    return utc_iso(base + timedelta(seconds=index))


@pytest.fixture
def seed_story(storage):
    """Insert a story directly; `n` orders records (higher is newer)."""
    def _seed(n: int = 0, **fields):
        data = {
            "guestName": f"Guest {n}",
            "relationship": "Friend",
            "storyTitle": f"Story {n}",
            "storyContent": "We laughed all night.",
            "favoriteMemory": "",
            "wishForCouple": "",
            "category": "funny",
            "photos": [],
            "submittedAt": _seconds_apart(n),
            "approved": True,
            "featured": False,
            "likes": 0,
            "tags": [],
        }
        data.update(fields)
        return storage.create_record(GUEST_STORIES, data)

    return _seed


@pytest.fixture
def seed_entry(storage):
    def _seed(n: int = 0, **fields):
        data = {
            "name": f"Guest {n}",
            "message": f"Congratulations {n}!",
            "submittedAt": _seconds_apart(n),
            "approved": True,
            "featured": False,
        }
        data.update(fields)
        return storage.create_record(GUESTBOOK_ENTRIES, data)

    return _seed


@pytest.fixture
def seed_media(storage, blobs):
    """Insert a media record and write its blob."""
    def _seed(n: int = 0, **fields):
        key = f"album/img-{n}.jpg"
        blobs.upload(key, b"\xff\xd8\xff", "image/jpeg")
        data = {
            "filename": key,
            "filepath": key,
            "mimetype": "image/jpeg",
            "originalName": f"photo{n}.jpg",
            "size": 3,
            "uploadedBy": "Anonymous Guest",
            "submittedAt": _seconds_apart(n),
            "approved": True,
            "featured": False,
        }
        data.update(fields)
        return storage.create_record(PHOTOS, data)

    return _seed
