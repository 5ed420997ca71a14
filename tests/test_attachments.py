"""
Tests for attachment upload, listing, download and removal.
"""

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from casenotes.core.config import DOCX_MIME_TYPE
from casenotes.models import Attachment, CaseNote
from casenotes.services.attachment_service import AttachmentService
from tests.factories import create_test_attachment, create_test_case_note

MIB = 1024 * 1024


@pytest.fixture
def note_id(client: TestClient, author_headers):
    response = client.post(
        "/api/case-notes",
        json={"programArea": "Medical", "translationProvided": False, "narrative": "Clinic referral"},
        headers=author_headers,
    )
    return response.json()["id"]


def _stored_files(storage):
    return sorted(p.name for p in Path(storage.upload_dir).iterdir())


def _upload(client, note_id, headers, *files):
    return client.post(
        f"/api/case-notes/{note_id}/attachments",
        files=[("files", f) for f in files],
        headers=headers,
    )


def test_upload_png_is_accepted(client: TestClient, storage, note_id, author_headers):
    response = _upload(client, note_id, author_headers, ("scan.png", b"\x89PNG" + b"0" * MIB, "image/png"))

    assert response.status_code == 201
    assert "x-rejected-files" not in response.headers
    [attachment] = response.json()
    assert attachment["caseNoteId"] == note_id
    assert attachment["originalName"] == "scan.png"
    assert attachment["mimeType"] == "image/png"
    assert attachment["fileSize"] == MIB + 4
    # stored under a generated name, not the user's
    assert attachment["fileName"] != "scan.png"
    assert _stored_files(storage) == [attachment["fileName"]]


def test_upload_at_size_ceiling_is_accepted(client: TestClient, note_id, author_headers):
    response = _upload(client, note_id, author_headers, ("big.pdf", b"0" * (10 * MIB), "application/pdf"))

    assert response.status_code == 201


def test_text_file_is_rejected(client: TestClient, storage, db_session, note_id, author_headers):
    response = _upload(client, note_id, author_headers, ("notes.txt", b"plain text", "text/plain"))

    assert response.status_code == 400
    data = response.json()
    assert data["errors"] == [{"field": "notes.txt", "message": "Unsupported file type: text/plain"}]
    assert _stored_files(storage) == []
    assert db_session.query(Attachment).count() == 0


def test_oversized_pdf_is_rejected(client: TestClient, storage, note_id, author_headers):
    response = _upload(client, note_id, author_headers, ("huge.pdf", b"0" * (15 * MIB), "application/pdf"))

    assert response.status_code == 400
    assert response.json()["errors"][0]["message"] == "File too large"
    assert _stored_files(storage) == []


def test_empty_file_is_accepted(client: TestClient, storage, note_id, author_headers):
    response = _upload(client, note_id, author_headers, ("blank.pdf", b"", "application/pdf"))

    assert response.status_code == 201
    [attachment] = response.json()
    assert attachment["fileSize"] == 0
    assert storage.read(attachment["fileName"]) == b""


def test_mixed_upload_keeps_valid_files_in_order(client: TestClient, storage, note_id, author_headers):
    response = _upload(
        client, note_id, author_headers,
        ("b.docx", b"PK docx", DOCX_MIME_TYPE),
        ("script.sh", b"#!/bin/sh", "application/x-sh"),
        ("a.webp", b"RIFF webp", "image/webp"),
    )

    assert response.status_code == 201
    assert [a["originalName"] for a in response.json()] == ["b.docx", "a.webp"]
    assert json.loads(response.headers["x-rejected-files"]) == [{"originalName": "script.sh", "message": "Unsupported file type: application/x-sh"}]
    assert len(_stored_files(storage)) == 2


def test_upload_without_files(client: TestClient, note_id, author_headers):
    response = client.post(f"/api/case-notes/{note_id}/attachments", headers=author_headers)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "files"


def test_upload_limits_file_count(client: TestClient, note_id, author_headers):
    files = [(f"p{i}.png", b"png", "image/png") for i in range(6)]

    response = _upload(client, note_id, author_headers, *files)

    assert response.status_code == 400


def test_upload_to_missing_note(client: TestClient, author_headers):
    response = _upload(client, 9999, author_headers, ("scan.png", b"png", "image/png"))

    assert response.status_code == 404


def test_non_author_cannot_upload(client: TestClient, storage, note_id, other_headers):
    response = _upload(client, note_id, other_headers, ("scan.png", b"png", "image/png"))

    assert response.status_code == 403
    assert _stored_files(storage) == []


def test_uploaded_files_show_on_note(client: TestClient, note_id, author_headers, other_headers):
    _upload(client, note_id, author_headers, ("one.pdf", b"1", "application/pdf"), ("two.jpg", b"2", "image/jpeg"))

    detail = client.get(f"/api/case-notes/{note_id}", headers=other_headers).json()
    listing = client.get(f"/api/case-notes/{note_id}/attachments", headers=author_headers).json()
    page = client.get("/api/case-notes", headers=author_headers).json()

    assert [a["originalName"] for a in detail["attachments"]] == ["one.pdf", "two.jpg"]
    assert [a["id"] for a in listing] == [a["id"] for a in detail["attachments"]]
    assert page["notes"][0]["attachments"] == detail["attachments"]


def test_author_can_download(client: TestClient, note_id, author_headers):
    created = _upload(client, note_id, author_headers, ("report.pdf", b"%PDF-1.7 body", "application/pdf"))
    attachment_id = created.json()[0]["id"]

    response = client.get(f"/api/attachments/{attachment_id}/download", headers=author_headers)

    assert response.status_code == 200
    assert response.content == b"%PDF-1.7 body"
    assert response.headers["content-type"] == "application/pdf"
    assert "report.pdf" in response.headers["content-disposition"]


def test_non_author_cannot_download(client: TestClient, note_id, author_headers, other_headers):
    created = _upload(client, note_id, author_headers, ("report.pdf", b"%PDF", "application/pdf"))
    attachment_id = created.json()[0]["id"]

    response = client.get(f"/api/attachments/{attachment_id}/download", headers=other_headers)

    assert response.status_code == 403


def test_author_can_delete_attachment(client: TestClient, storage, note_id, author_headers):
    created = _upload(client, note_id, author_headers, ("a.gif", b"GIF89a", "image/gif"), ("b.gif", b"GIF89a", "image/gif"))
    first, second = created.json()

    response = client.delete(f"/api/attachments/{first['id']}", headers=author_headers)

    assert response.status_code == 204
    assert _stored_files(storage) == [second["fileName"]]
    listing = client.get(f"/api/case-notes/{note_id}/attachments", headers=author_headers).json()
    assert [a["id"] for a in listing] == [second["id"]]


def test_non_author_cannot_delete_attachment(client: TestClient, storage, note_id, author_headers, other_headers):
    created = _upload(client, note_id, author_headers, ("a.gif", b"GIF89a", "image/gif"))
    attachment = created.json()[0]

    response = client.delete(f"/api/attachments/{attachment['id']}", headers=other_headers)

    assert response.status_code == 403
    assert _stored_files(storage) == [attachment["fileName"]]


def test_delete_missing_attachment(client: TestClient, author_headers):
    response = client.delete("/api/attachments/9999", headers=author_headers)

    assert response.status_code == 404


def test_deleting_note_cascades_to_attachments(client: TestClient, storage, db_session, note_id, author_headers):
    _upload(client, note_id, author_headers, ("one.pdf", b"1", "application/pdf"), ("two.png", b"2", "image/png"))

    response = client.delete(f"/api/case-notes/{note_id}", headers=author_headers)

    assert response.status_code == 204
    assert client.get(f"/api/case-notes/{note_id}", headers=author_headers).status_code == 404
    assert AttachmentService(db_session, storage).list_for(note_id) == []
    assert _stored_files(storage) == []


def test_missing_blob_does_not_block_delete(db_session, storage):
    note = create_test_case_note(db_session, caseworker_id="cw-1")
    attachment = create_test_attachment(db_session, note, storage=storage)
    Path(storage.upload_dir, attachment.file_name).unlink()

    AttachmentService(db_session, storage).delete(attachment.id, user_id="cw-1")

    assert db_session.get(Attachment, attachment.id) is None


def test_failed_row_insert_discards_written_bytes(db_session, storage, monkeypatch):
    import asyncio

    from sqlalchemy.exc import OperationalError

    from casenotes.core.exceptions import StorageError

    note = create_test_case_note(db_session, caseworker_id="cw-1")

    class FakeUpload:
        filename = "scan.png"
        content_type = "image/png"

        async def read(self, size=-1):
            return b"png bytes"

    def failing_commit():
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(db_session, "commit", failing_commit)

    with pytest.raises(StorageError):
        asyncio.run(AttachmentService(db_session, storage).upload(note.id, [FakeUpload()], "cw-1"))

    assert _stored_files(storage) == []
    assert db_session.get(CaseNote, note.id) is not None
