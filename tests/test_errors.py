"""
Tests for error response shapes.
"""

from fastapi.testclient import TestClient

from casenotes.core.dependencies import get_attachment_storage
from casenotes.core.exceptions import StorageError
from casenotes.main import app
from casenotes.utils.storage import AttachmentStorage


class BrokenStorage(AttachmentStorage):
    def save(self, data, original_name):
        raise StorageError("Failed to write attachment", detail="/var/data/uploads: No space left on device")

    def read(self, stored_name):
        raise StorageError("Failed to read attachment", detail="/var/data/uploads: I/O error")

    def delete(self, stored_name):
        raise StorageError("Failed to delete attachment", detail="/var/data/uploads: I/O error")


def test_storage_failures_do_not_leak_details(client: TestClient, author_headers):
    note_id = client.post(
        "/api/case-notes",
        json={"programArea": "ELI", "translationProvided": False, "narrative": "Eligibility check"},
        headers=author_headers,
    ).json()["id"]
    app.dependency_overrides[get_attachment_storage] = lambda: BrokenStorage()

    response = client.post(
        f"/api/case-notes/{note_id}/attachments",
        files=[("files", ("a.pdf", b"%PDF", "application/pdf"))],
        headers=author_headers,
    )

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "Internal server error"
    assert "/var/data" not in response.text


def test_blob_cleanup_failure_still_deletes_note(client: TestClient, db_session, author_headers):
    from tests.factories import create_test_attachment

    from casenotes.models import CaseNote

    note_id = client.post(
        "/api/case-notes",
        json={"programArea": "RMA", "translationProvided": True, "narrative": "Medical assistance"},
        headers=author_headers,
    ).json()["id"]
    create_test_attachment(db_session, db_session.get(CaseNote, note_id))
    app.dependency_overrides[get_attachment_storage] = lambda: BrokenStorage()

    response = client.delete(f"/api/case-notes/{note_id}", headers=author_headers)

    assert response.status_code == 204
    assert client.get(f"/api/case-notes/{note_id}", headers=author_headers).status_code == 404


def test_path_validation_errors_are_400(client: TestClient, author_headers):
    response = client.get("/api/case-notes/not-a-number", headers=author_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


def test_health(client: TestClient):
    assert client.get("/health").json() == {"status": "ok"}
