"""
Tests for the guest story endpoints.

Run with: pytest tests/test_guest_stories.py -v
"""
from adapters.base import GUEST_STORIES


class TestSubmitStory:
    """POST /guest-stories"""

    def test_created_pending_with_derived_category(self, client, storage):
        """Ceremony wins over later categories; the record starts hidden."""
        res = client.post(
            "/guest-stories",
            json={
                "guestName": "Sam",
                "storyTitle": "T",
                "storyContent": "We met at the wedding ceremony and laughed all night",
            },
        )
        assert res.status_code == 201
        body = res.json()
        assert body["success"] is True
        story = body["data"]["story"]
        assert story["category"] == "wedding-day"
        assert story["approved"] is False
        assert story["featured"] is False
        assert story["submittedAt"].endswith("Z")

        stored = storage.get_record(GUEST_STORIES, body["data"]["id"])
        assert stored["approved"] is False
        assert stored["guestName"] == "Sam"

    def test_client_cannot_self_approve(self, client, storage):
        """approved/featured in the body are ignored."""
        res = client.post(
            "/guest-stories",
            json={
                "guestName": "Sam",
                "storyTitle": "T",
                "storyContent": "hello",
                "approved": True,
                "featured": True,
            },
        )
        assert res.status_code == 201
        stored = storage.get_record(GUEST_STORIES, res.json()["data"]["id"])
        assert stored["approved"] is False
        assert stored["featured"] is False

    def test_tags_capped_at_three(self, client):
        res = client.post(
            "/guest-stories",
            json={
                "guestName": "Ana",
                "storyTitle": "Night",
                "storyContent": "I was in tears, we danced at the party, it was amazing and sweet",
            },
        )
        assert res.status_code == 201
        assert res.json()["data"]["story"]["tags"] == ["emotional", "fun", "special"]

    def test_explicit_category_kept(self, client):
        res = client.post(
            "/guest-stories",
            json={"guestName": "A", "storyTitle": "B", "storyContent": "ceremony", "category": "advice"},
        )
        assert res.status_code == 201
        assert res.json()["data"]["story"]["category"] == "advice"

    def test_unknown_category_rejected(self, client, storage):
        res = client.post(
            "/guest-stories",
            json={"guestName": "A", "storyTitle": "B", "storyContent": "C", "category": "gossip"},
        )
        assert res.status_code == 400
        assert storage.list_records(GUEST_STORIES) == []

    def test_missing_required_fields(self, client, storage):
        """Whitespace-only counts as missing; nothing is written."""
        res = client.post(
            "/guest-stories",
            json={"guestName": "   ", "storyTitle": "T", "storyContent": "C"},
        )
        assert res.status_code == 400
        body = res.json()
        assert body["success"] is False
        assert body["error"]["message"] == "Guest name, story title, and content are required"
        assert storage.list_records(GUEST_STORIES) == []

    def test_content_too_long(self, client, storage):
        res = client.post(
            "/guest-stories",
            json={"guestName": "A", "storyTitle": "B", "storyContent": "x" * 5001},
        )
        assert res.status_code == 400
        assert storage.list_records(GUEST_STORIES) == []

    def test_store_failure_is_500_without_retry(self, client, storage, monkeypatch):
        """One write attempt; the failure surfaces as a generic 500."""
        calls = []

        def broken(collection, data):
            calls.append(collection)
            raise RuntimeError("store down")

        monkeypatch.setattr(storage, "create_record", broken)
        res = client.post(
            "/guest-stories",
            json={"guestName": "A", "storyTitle": "B", "storyContent": "C"},
        )
        assert res.status_code == 500
        body = res.json()
        assert body["success"] is False
        assert body["error"]["message"] == "Failed to submit story"
        assert calls == [GUEST_STORIES]

    def test_defaults_relationship_and_trims_photos(self, client):
        res = client.post(
            "/guest-stories",
            json={
                "guestName": "A",
                "storyTitle": "B",
                "storyContent": "C",
                "photos": [f"https://example.com/{i}.jpg" for i in range(7)],
            },
        )
        story = res.json()["data"]["story"]
        assert story["relationship"] == "Friend"
        assert len(story["photos"]) == 5


class TestListStories:
    """GET /guest-stories and friends"""

    def test_only_approved_newest_first(self, client, seed_story):
        seed_story(1)
        seed_story(2, approved=False)
        newest = seed_story(3)

        data = client.get("/guest-stories").json()["data"]
        assert data["total"] == 2
        assert data["stories"][0]["id"] == newest
        assert all(s["approved"] for s in data["stories"])

    def test_category_pagination(self, client, seed_story):
        """Second of three funny stories; total counts only that category."""
        seed_story(1)
        middle = seed_story(2)
        seed_story(3)
        seed_story(4, category="family")

        res = client.get("/guest-stories", params={"category": "funny", "limit": 1, "offset": 1})
        data = res.json()["data"]
        assert [s["id"] for s in data["stories"]] == [middle]
        assert data["total"] == 3
        assert data["hasMore"] is True

    def test_last_page_has_no_more(self, client, seed_story):
        for n in range(3):
            seed_story(n)
        data = client.get("/guest-stories", params={"limit": 2, "offset": 2}).json()["data"]
        assert len(data["stories"]) == 1
        assert data["hasMore"] is False

    def test_category_all_means_no_filter(self, client, seed_story):
        seed_story(1)
        seed_story(2, category="family")
        data = client.get("/guest-stories", params={"category": "all"}).json()["data"]
        assert data["total"] == 2

    def test_facets(self, client, seed_story):
        seed_story(1)
        seed_story(2)
        seed_story(3, category="family")
        seed_story(4, category="romantic", approved=False)

        categories = client.get("/guest-stories/categories").json()["data"]["categories"]
        counts = {c["id"]: c["count"] for c in categories}
        assert counts == {"funny": 2, "family": 1}
        labels = {c["id"]: c["label"] for c in categories}
        assert labels["funny"] == "Funny Moments"

    def test_featured(self, client, seed_story):
        featured = seed_story(1, featured=True)
        seed_story(2)
        seed_story(3, approved=False, featured=True)

        stories = client.get("/guest-stories/featured").json()["data"]["stories"]
        assert [s["id"] for s in stories] == [featured]

    def test_limit_bounds(self, client):
        assert client.get("/guest-stories", params={"limit": 0}).status_code == 400
        assert client.get("/guest-stories", params={"offset": -1}).status_code == 400


class TestModerateStory:
    """Admin routes"""

    def test_admin_all_requires_key(self, client, seed_story):
        seed_story(1)
        res = client.get("/guest-stories/admin/all")
        assert res.status_code == 401
        assert res.json()["error"]["message"] == "Not authorized, token failed or is missing."

    def test_admin_all_includes_pending(self, client, seed_story, admin_headers):
        seed_story(1)
        seed_story(2, approved=False)
        stories = client.get("/guest-stories/admin/all", headers=admin_headers).json()["data"]["stories"]
        assert len(stories) == 2

    def test_approve_and_feature(self, client, storage, seed_story, admin_headers):
        story_id = seed_story(1, approved=False)
        res = client.patch(
            f"/guest-stories/admin/{story_id}/status",
            json={"approved": True, "featured": True},
            headers=admin_headers,
        )
        assert res.status_code == 200
        data = res.json()["data"]
        assert data == {
            "message": "Story approved successfully",
            "storyId": story_id,
            "approved": True,
            "featured": True,
            "deleted": False,
        }
        stored = storage.get_record(GUEST_STORIES, story_id)
        assert stored["featured"] is True
        assert stored["reviewedAt"].endswith("Z")

    def test_unapprove_clears_featured(self, client, storage, seed_story, admin_headers):
        story_id = seed_story(1, approved=True, featured=True)
        res = client.patch(
            f"/guest-stories/admin/{story_id}/status",
            json={"approved": False},
            headers=admin_headers,
        )
        data = res.json()["data"]
        assert data["approved"] is False
        assert data["featured"] is False
        # hidden, not deleted
        assert storage.get_record(GUEST_STORIES, story_id)["featured"] is False

    def test_featured_requires_approval(self, client, seed_story, admin_headers):
        story_id = seed_story(1, approved=False)
        res = client.patch(
            f"/guest-stories/admin/{story_id}/status",
            json={"approved": False, "featured": True},
            headers=admin_headers,
        )
        assert res.json()["data"]["featured"] is False

    def test_idempotent(self, client, seed_story, admin_headers):
        story_id = seed_story(1, approved=False)
        url = f"/guest-stories/admin/{story_id}/status"
        first = client.patch(url, json={"approved": True}, headers=admin_headers).json()["data"]
        second = client.patch(url, json={"approved": True}, headers=admin_headers).json()["data"]
        assert first == second

    def test_string_boolean_rejected(self, client, seed_story, admin_headers):
        story_id = seed_story(1, approved=False)
        res = client.patch(
            f"/guest-stories/admin/{story_id}/status",
            json={"approved": "true"},
            headers=admin_headers,
        )
        assert res.status_code == 400
        assert res.json()["success"] is False

    def test_unknown_story(self, client, admin_headers):
        res = client.patch(
            "/guest-stories/admin/nope/status",
            json={"approved": True},
            headers=admin_headers,
        )
        assert res.status_code == 404

    def test_approved_story_becomes_public(self, client, seed_story, admin_headers):
        story_id = seed_story(1, approved=False)
        assert client.get("/guest-stories").json()["data"]["total"] == 0

        client.patch(
            f"/guest-stories/admin/{story_id}/status",
            json={"approved": True},
            headers=admin_headers,
        )
        stories = client.get("/guest-stories").json()["data"]["stories"]
        assert [s["id"] for s in stories] == [story_id]
