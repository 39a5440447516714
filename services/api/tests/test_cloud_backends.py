"""
Firestore and GCS backends against mocked Google clients, plus the local
blob store they stand in for.

Run with: pytest tests/test_cloud_backends.py -v
"""
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from google.cloud import firestore

from adapters.base import RECORD_NOT_FOUND
from adapters.firestore import FirestoreAdapter, service_account_credentials
from core.blob_store import GcsBlobStore, LocalBlobStore, sanitize_filename, validate_file_type


def _snapshot(doc_id, data, exists=True):
    snap = MagicMock()
    snap.id = doc_id
    snap.exists = exists
    snap.to_dict.return_value = dict(data) if data is not None else None
    return snap


class TestFirestoreAdapter:
    def test_create_returns_firestore_id(self):
        client = MagicMock()
        doc_ref = MagicMock()
        doc_ref.id = "abc"
        client.collection.return_value.add.return_value = (None, doc_ref)

        adapter = FirestoreAdapter(client=client)
        assert adapter.create_record("guestStories", {"id": "x", "title": "t"}) == "abc"
        client.collection.assert_called_with("guestStories")
        client.collection.return_value.add.assert_called_with({"title": "t"})

    def test_get_missing(self):
        client = MagicMock()
        client.collection.return_value.document.return_value.get.return_value = _snapshot("a", None, exists=False)
        assert FirestoreAdapter(client=client).get_record("photos", "a") is None

    def test_list_applies_filters_and_order(self):
        client = MagicMock()
        query = client.collection.return_value
        query.where.return_value = query
        query.order_by.return_value = query
        query.stream.return_value = [_snapshot("1", {"approved": True})]

        rows = FirestoreAdapter(client=client).list_records(
            "guestStories", filters={"approved": True}, order_by="submittedAt"
        )
        assert rows == [{"approved": True, "id": "1"}]
        assert query.where.call_count == 1
        query.order_by.assert_called_with("submittedAt", direction=firestore.Query.DESCENDING)

    def test_update_missing_raises(self):
        client = MagicMock()
        client.collection.return_value.document.return_value.get.return_value = _snapshot("a", None, exists=False)
        with pytest.raises(ValueError, match=RECORD_NOT_FOUND):
            FirestoreAdapter(client=client).update_record("photos", "a", {"approved": True})

    def test_update_strips_id(self):
        client = MagicMock()
        doc_ref = client.collection.return_value.document.return_value
        doc_ref.get.return_value = _snapshot("a", {"approved": True})

        row = FirestoreAdapter(client=client).update_record("photos", "a", {"approved": True, "id": "z"})
        doc_ref.update.assert_called_with({"approved": True})
        assert row["id"] == "a"

    def test_delete_missing_raises(self):
        client = MagicMock()
        client.collection.return_value.document.return_value.get.return_value = _snapshot("a", None, exists=False)
        with pytest.raises(ValueError, match=RECORD_NOT_FOUND):
            FirestoreAdapter(client=client).delete_record("photos", "a")

    def test_slash_in_id_is_not_found(self):
        """Ids with "/" never reach document(), which would reject them."""
        client = MagicMock()
        document = client.collection.return_value.document
        document.side_effect = ValueError("A document must have an even number of path elements")
        adapter = FirestoreAdapter(client=client)

        assert adapter.get_record("photos", "a/b") is None
        with pytest.raises(ValueError, match=RECORD_NOT_FOUND):
            adapter.update_record("photos", "a/b", {"approved": True})
        with pytest.raises(ValueError, match=RECORD_NOT_FOUND):
            adapter.delete_record("photos", "a/b")
        document.assert_not_called()

    def test_no_credentials_means_adc(self):
        assert service_account_credentials("", ["scope"]) is None


class TestGcsBlobStore:
    def test_upload_delete_and_signed_url(self):
        client = MagicMock()
        blob = client.bucket.return_value.blob.return_value
        blob.generate_signed_url.return_value = "https://signed"

        store = GcsBlobStore("bucket", client=client)
        assert store.upload("album/a.jpg", b"data", "image/jpeg") == "album/a.jpg"
        blob.upload_from_string.assert_called_with(b"data", content_type="image/jpeg")

        assert store.signed_url("album/a.jpg", 60) == "https://signed"
        blob.generate_signed_url.assert_called_with(
            version="v4", expiration=timedelta(seconds=60), method="GET"
        )

        store.delete("album/a.jpg")
        blob.delete.assert_called_once()

    def test_bucket_required(self):
        with pytest.raises(ValueError):
            GcsBlobStore("", client=MagicMock())


class TestLocalBlobStore:
    def test_round_trip(self, tmp_path):
        store = LocalBlobStore(str(tmp_path), "/files/")
        store.upload("album/a.jpg", b"x", "image/jpeg")
        assert store.exists("album/a.jpg")
        assert store.signed_url("album/a.jpg") == "/files/album/a.jpg"
        store.delete("album/a.jpg")
        assert not store.exists("album/a.jpg")
        with pytest.raises(FileNotFoundError):
            store.delete("album/a.jpg")

    def test_key_cannot_escape_root(self, tmp_path):
        store = LocalBlobStore(str(tmp_path / "root"))
        with pytest.raises(ValueError):
            store.upload("../outside.jpg", b"x", "image/jpeg")


class TestFileRules:
    def test_sanitize(self):
        assert sanitize_filename("../my photo!.JPG") == ".._my_photo_.JPG"

    def test_extension_and_mime_must_both_pass(self):
        validate_file_type("a.JPG", "image/jpeg")
        validate_file_type("clip.mov", "video/quicktime")
        for name, mime in [("a.jpg", "text/plain"), ("a.txt", "image/jpeg"), ("noext", "image/png")]:
            with pytest.raises(ValueError, match="File type not allowed"):
                validate_file_type(name, mime)
