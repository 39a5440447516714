# services/api/adapters/firestore/__init__.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2.service_account import Credentials

from ..base import RECORD_NOT_FOUND, StorageAdapter

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/datastore"]


def service_account_credentials(google_sa_json: str, scopes: List[str]) -> Optional[Credentials]:
    """
    Accepts either:
      - absolute/relative path to a service-account JSON file, OR
      - a literal JSON string.
    Returns None when nothing is configured, so the client falls back to
    Application Default Credentials (Cloud Run, emulator, gcloud login).
    """
    if not google_sa_json:
        return None

    # Try to treat as inline JSON first
    try:
        parsed = json.loads(google_sa_json)
        return Credentials.from_service_account_info(parsed, scopes=scopes)
    except json.JSONDecodeError:
        # Not JSON; treat as file path
        return Credentials.from_service_account_file(google_sa_json, scopes=scopes)


def _doc_to_dict(snapshot) -> Dict[str, Any]:
    data = snapshot.to_dict() or {}
    data["id"] = snapshot.id
    return data


class FirestoreAdapter(StorageAdapter):
    """
    Firestore implementation of the content store.
    - one Firestore collection per record collection
    - document ids are assigned by Firestore on create
    - no caching: every call goes to Firestore
    """

    def __init__(
        self,
        google_sa_json: Optional[str] = None,
        project_id: Optional[str] = None,
        database: str = "(default)",
        client: Optional[firestore.Client] = None,
    ) -> None:
        if client is not None:
            self.db = client
            return

        creds = service_account_credentials(google_sa_json or "", SCOPES)
        project = project_id or (creds.project_id if creds else None)
        self.db = firestore.Client(project=project, credentials=creds, database=database)
        logger.info(f"Firestore client ready (project={self.db.project}, database={database})")

    def create_record(self, collection: str, data: Dict[str, Any]) -> str:
        body = {k: v for k, v in data.items() if k != "id"}
        _, doc_ref = self.db.collection(collection).add(body)
        return doc_ref.id

    def _doc_ref(self, collection: str, record_id: str):
        """Document reference, or None when the id can't name a document in `collection`."""
        # "/" would address a subcollection path instead
        if not record_id or "/" in record_id:
            return None
        return self.db.collection(collection).document(record_id)

    def get_record(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        doc_ref = self._doc_ref(collection, record_id)
        if doc_ref is None:
            return None
        snapshot = doc_ref.get()
        if not snapshot.exists:
            return None
        return _doc_to_dict(snapshot)

    def list_records(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
    ) -> List[Dict[str, Any]]:
        q = self.db.collection(collection)
        for key, value in (filters or {}).items():
            q = q.where(filter=FieldFilter(key, "==", value))
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            q = q.order_by(order_by, direction=direction)
        return [_doc_to_dict(s) for s in q.stream()]

    def update_record(self, collection: str, record_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        doc_ref = self._doc_ref(collection, record_id)
        if doc_ref is None or not doc_ref.get().exists:
            raise ValueError(RECORD_NOT_FOUND)
        doc_ref.update({k: v for k, v in updates.items() if k != "id"})
        return _doc_to_dict(doc_ref.get())

    def delete_record(self, collection: str, record_id: str) -> None:
        doc_ref = self._doc_ref(collection, record_id)
        if doc_ref is None or not doc_ref.get().exists:
            raise ValueError(RECORD_NOT_FOUND)
        doc_ref.delete()

    def ping(self) -> None:
        # Reads at most one document; raises on auth/network failure
        list(self.db.collection("guestStories").limit(1).stream())
