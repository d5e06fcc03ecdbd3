# =============================================================================
# tests/test_approval.py - Admin review endpoints and signed media links
# =============================================================================

import logging
from urllib.parse import urlsplit

import pytest

import main
from tests.conftest import bearer, login, register

FORM = {
    "title": "Orbital Library",
    "description": "Books in orbit.",
    "goals": "Launch one shelf.",
    "type": "Culture",
    "teamInfo": "Two librarians.",
    "budgetBreakdown": "Shelf, rocket.",
}


def _submit(client, token, title, files=None):
    resp = client.post(
        "/api/submission",
        data=dict(FORM, title=title),
        files=files,
        headers=bearer(token),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["submission_id"]


class TestAdminGuard:
    def test_regular_user_is_forbidden(self, client, user_token):
        assert client.get("/api/approval/pending-ids", headers=bearer(user_token)).status_code == 403
        assert client.get("/api/approval/1", headers=bearer(user_token)).status_code == 403

    def test_anonymous_is_unauthorized(self, client):
        assert client.get("/api/approval/pending-ids").status_code == 401

    def test_revoked_admin_with_old_token_is_forbidden(self, client, fake_db):
        user_id = register(client, username="former-admin", email="former@example.com")
        fake_db.grant_admin(user_id)
        token = login(client, email="former@example.com")
        fake_db.revoke_admin(user_id)

        resp = client.get("/api/approval/pending-ids", headers=bearer(token))

        assert resp.status_code == 403


class TestPendingIds:
    def test_only_pending_newest_first(self, client, fake_db, user_token, admin_token):
        first = _submit(client, user_token, "First")
        second = _submit(client, user_token, "Second")
        third = _submit(client, user_token, "Third")
        fake_db.submissions[second]["status"] = "Approved"

        resp = client.get("/api/approval/pending-ids", headers=bearer(admin_token))

        assert resp.status_code == 200
        assert resp.json() == [third, first]

    def test_empty_queue(self, client, admin_token):
        resp = client.get("/api/approval/pending-ids", headers=bearer(admin_token))

        assert resp.status_code == 200
        assert resp.json() == []


class TestSubmissionDetail:
    def test_unknown_id_is_not_found(self, client, admin_token):
        resp = client.get("/api/approval/9999", headers=bearer(admin_token))

        assert resp.status_code == 404
        assert resp.json()["detail"] == "Submission 9999 not found."

    @pytest.mark.parametrize("submission_id", ["0", "-3", "99999999999999999999"])
    def test_out_of_range_id_is_not_found(self, client, admin_token, submission_id):
        resp = client.get(f"/api/approval/{submission_id}", headers=bearer(admin_token))

        assert resp.status_code == 404
        assert resp.json()["detail"] == f"Submission {submission_id} not found."

    def test_detail_returns_signed_urls(self, client, storage, user_token, admin_token):
        submission_id = _submit(
            client,
            user_token,
            "With files",
            files=[
                ("images", ("a.png", b"image-a", "image/png")),
                ("images", ("b.png", b"image-b", "image/png")),
                ("documents", ("budget.pdf", b"%PDF", "application/pdf")),
            ],
        )

        resp = client.get(f"/api/approval/{submission_id}", headers=bearer(admin_token))

        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == submission_id
        assert body["title"] == "With files"
        assert body["status"] == "Pending"
        assert body["url_expires_in"] == 3600
        assert len(body["image_urls"]) == 2
        assert body["video_urls"] == []
        assert len(body["document_urls"]) == 1
        assert all("token=" in url for url in body["image_urls"] + body["document_urls"])

        media = client.get(body["image_urls"][1])
        assert media.status_code == 200
        assert media.content == b"image-b"

    def test_signed_url_for_other_key_is_rejected(self, client, user_token, admin_token):
        submission_id = _submit(
            client,
            user_token,
            "Tamper",
            files=[
                ("images", ("a.png", b"image-a", "image/png")),
                ("documents", ("secret.pdf", b"%PDF", "application/pdf")),
            ],
        )
        body = client.get(f"/api/approval/{submission_id}", headers=bearer(admin_token)).json()
        image_token = urlsplit(body["image_urls"][0]).query
        document_path = urlsplit(body["document_urls"][0]).path

        resp = client.get(f"{document_path}?{image_token}")

        assert resp.status_code == 403


class TestMedia:
    def test_missing_object_is_not_found(self, client):
        assert client.get("/api/media/images/nothing.png").status_code == 404

    def test_private_local_storage_requires_signature(self, client, storage):
        storage.public_read = False
        storage.put_object("images/x.png", b"x")

        assert client.get("/api/media/images/x.png").status_code == 403

        signed = storage.presigned_url("images/x.png", expires_in=60)
        assert client.get(signed).status_code == 200


class TestLiveness:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_alive_and_ping(self, client):
        assert client.get("/api/test/alive").json() == {"message": "The API breathes! All systems nominal."}
        assert client.get("/api/test/ping").json() == {"message": "Pong!"}

    def test_unknown_log_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "verbose")
        assert main.log_level() == logging.INFO

        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert main.log_level() == logging.DEBUG
