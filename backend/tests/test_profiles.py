"""Tests for Profile CRUD."""
from tests.conftest import create_test_profile


class TestProfileCRUD:

    def test_create_profile(self, client):
        data = create_test_profile(client, username="dj_ana", role="artist", display_name="DJ Ana")
        assert data["username"] == "dj_ana"
        assert data["role"] == "artist"
        assert "profile_id" in data

    def test_username_must_be_unique(self, client):
        create_test_profile(client, username="dj_ana")
        resp = client.post("/api/profiles/", json={"username": "dj_ana", "role": "audience"})
        assert resp.status_code == 400

    def test_username_charset(self, client):
        resp = client.post("/api/profiles/", json={"username": "DJ Ana", "role": "artist"})
        assert resp.status_code == 400

    def test_invalid_role(self, client):
        resp = client.post("/api/profiles/", json={"username": "ana", "role": "producer"})
        assert resp.status_code == 400

    def test_get_profile(self, client):
        created = create_test_profile(client)
        resp = client.get(f"/api/profiles/{created['profile_id']}")
        assert resp.status_code == 200
        assert resp.json()["username"] == created["username"]

    def test_get_profile_not_found(self, client):
        resp = client.get("/api/profiles/nonexistent-id")
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"

    def test_list_profiles(self, client):
        create_test_profile(client, username="ana")
        create_test_profile(client, username="bruno", role="audience")
        resp = client.get("/api/profiles/")
        assert [p["username"] for p in resp.json()] == ["ana", "bruno"]
