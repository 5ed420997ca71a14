# casenotes/services/attachment_service.py
import logging
from typing import List, Tuple

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from casenotes.core.config import settings
from casenotes.core.exceptions import NotFoundError, StorageError, ValidationError
from casenotes.models.attachment import Attachment
from casenotes.models.case_note import CaseNote
from casenotes.services.authorization import ensure_author
from casenotes.utils.storage import AttachmentStorage

logger = logging.getLogger(__name__)


class AttachmentService:
    def __init__(self, db: Session, storage: AttachmentStorage):
        self.db = db
        self.storage = storage

    def _get_case_note(self, case_note_id: int) -> CaseNote:
        note = self.db.query(CaseNote).filter(CaseNote.id == case_note_id).first()
        if not note:
            raise NotFoundError("Case note", case_note_id)
        return note

    def _get_attachment(self, attachment_id: int) -> Attachment:
        attachment = self.db.query(Attachment).filter(Attachment.id == attachment_id).first()
        if not attachment:
            raise NotFoundError("Attachment", attachment_id)
        return attachment

    async def _read_validated(self, uploaded_file: UploadFile) -> Tuple[bytes, str]:
        """Returns (data, "") for an acceptable file or (b"", reason) otherwise."""
        content_type = (uploaded_file.content_type or "").split(";")[0].strip().lower()
        if content_type not in settings.ALLOWED_UPLOAD_TYPES:
            return b"", f"Unsupported file type: {content_type or 'unknown'}"

        # one byte past the ceiling is enough to know it is too large
        data = await uploaded_file.read(settings.MAX_UPLOAD_SIZE_BYTES + 1)
        if len(data) > settings.MAX_UPLOAD_SIZE_BYTES:
            return b"", "File too large"
        return data, ""

    async def upload(self, case_note_id: int, files: List[UploadFile], user_id: str):
        """
        Attach files to a case note the user wrote.

        Returns (created attachments in upload order, rejected files). Nothing is
        persisted for rejected files; if every file is rejected the call fails.
        """
        note = self._get_case_note(case_note_id)
        ensure_author(note, user_id, "add attachments to")

        if not files:
            raise ValidationError("No files provided", field="files")
        if len(files) > settings.MAX_FILES_PER_UPLOAD:
            raise ValidationError(
                f"At most {settings.MAX_FILES_PER_UPLOAD} files per upload", field="files"
            )

        # -------------------
        # Validation
        # -------------------
        accepted = []
        rejected = []
        for uploaded_file in files:
            original_name = uploaded_file.filename or "upload"
            data, reason = await self._read_validated(uploaded_file)
            if reason:
                logger.info("Rejected upload %r for case note %s: %s", original_name, case_note_id, reason)
                rejected.append({"original_name": original_name, "message": reason})
                continue
            accepted.append((uploaded_file, original_name, data))

        if not accepted:
            raise ValidationError(
                "No acceptable files provided",
                errors=[{"field": r["original_name"], "message": r["message"]} for r in rejected],
            )

        # -------------------
        # Save bytes, then rows
        # -------------------
        stored_names = []
        try:
            for _, original_name, data in accepted:
                stored_names.append(self.storage.save(data, original_name))
        except StorageError:
            self._discard_blobs(stored_names)
            raise

        created = []
        for (uploaded_file, original_name, data), stored_name in zip(accepted, stored_names):
            attachment = Attachment(
                file_name=stored_name,
                original_name=original_name,
                mime_type=uploaded_file.content_type.split(";")[0].strip().lower(),
                file_size=len(data),
            )
            note.attachments.append(attachment)
            created.append(attachment)

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self._discard_blobs(stored_names)
            raise StorageError("Failed to save attachments", detail=str(e)) from e

        for attachment in created:
            self.db.refresh(attachment)
        logger.info("Added %d attachment(s) to case note %s (%d rejected)",
                    len(created), case_note_id, len(rejected))
        return created, rejected

    def list_for(self, case_note_id: int) -> List[Attachment]:
        return (
            self.db.query(Attachment)
            .filter(Attachment.case_note_id == case_note_id)
            .order_by(Attachment.id)
            .all()
        )

    def download(self, attachment_id: int, user_id: str) -> Tuple[Attachment, bytes]:
        attachment = self._get_attachment(attachment_id)
        ensure_author(attachment.case_note, user_id, "download attachments from")
        return attachment, self.storage.read(attachment.file_name)

    def delete(self, attachment_id: int, user_id: str):
        attachment = self._get_attachment(attachment_id)
        ensure_author(attachment.case_note, user_id, "remove attachments from")

        stored_name = attachment.file_name
        self.db.delete(attachment)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Failed to delete attachment", detail=str(e)) from e
        logger.info("Attachment %s removed by %s", attachment_id, user_id)

        # the row is gone; a leftover blob is an orphan, not a dangling reference
        try:
            self.storage.delete(stored_name)
        except StorageError as e:
            logger.error("Orphaned attachment blob %s: %s", stored_name, e.detail or e.message)

    def _discard_blobs(self, stored_names: List[str]):
        for name in stored_names:
            try:
                self.storage.delete(name)
            except StorageError as e:
                logger.error("Could not clean up blob %s: %s", name, e.detail or e.message)
