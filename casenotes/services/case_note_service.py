# casenotes/services/case_note_service.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, func, select, true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager, selectinload

from pydantic import ValidationError as PydanticValidationError

from casenotes.core.exceptions import NotFoundError, StorageError, ValidationError
from casenotes.models.case_note import CaseNote
from casenotes.models.user import User
from casenotes.schemas.case_note import CaseNoteCreate, CaseNoteFilters, CaseNoteUpdate, SortBy
from casenotes.services.authorization import ensure_author
from casenotes.utils.storage import AttachmentStorage

logger = logging.getLogger(__name__)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class CaseNoteService:
    def __init__(self, db: Session, storage: Optional[AttachmentStorage] = None):
        self.db = db
        self.storage = storage

    # -------------------
    # Query building
    # -------------------
    def _conditions(self, filters: CaseNoteFilters) -> list:
        conditions = []
        if filters.program_area:
            conditions.append(CaseNote.program_area == filters.program_area.value)
        if filters.search:
            conditions.append(CaseNote.narrative.ilike(f"%{_escape_like(filters.search)}%", escape="\\"))
        if filters.start_date:
            conditions.append(CaseNote.created_at >= filters.start_date)
        if filters.end_date:
            conditions.append(CaseNote.created_at <= filters.end_date)
        return conditions

    def _order_by(self, sort_by: SortBy) -> list:
        if sort_by == SortBy.OLDEST:
            return [CaseNote.created_at.asc(), CaseNote.id.asc()]
        if sort_by == SortBy.PROGRAM:
            return [CaseNote.program_area.asc(), CaseNote.created_at.desc(), CaseNote.id.desc()]
        if sort_by == SortBy.CASEWORKER:
            # unresolved caseworkers sort as "" and land first
            return [func.coalesce(User.last_name, "").asc(), CaseNote.created_at.desc(), CaseNote.id.desc()]
        return [CaseNote.created_at.desc(), CaseNote.id.desc()]

    def _details_query(self):
        return (
            select(CaseNote)
            .outerjoin(CaseNote.caseworker)
            .options(contains_eager(CaseNote.caseworker), selectinload(CaseNote.attachments))
            .execution_options(populate_existing=True)
        )

    def list_case_notes(self, filters: CaseNoteFilters) -> dict:
        conditions = self._conditions(filters)
        where_clause = and_(*conditions) if conditions else true()

        # count and page share the same predicate
        total = self.db.scalar(select(func.count(CaseNote.id)).where(where_clause))

        stmt = (
            self._details_query()
            .where(where_clause)
            .order_by(*self._order_by(filters.sort_by))
            .limit(filters.limit)
            .offset(filters.offset)
        )
        notes = self.db.scalars(stmt).unique().all()
        return {"notes": notes, "total": total or 0}

    # -------------------
    # Single note
    # -------------------
    def get_case_note(self, case_note_id: int) -> CaseNote:
        note = self.db.scalars(self._details_query().where(CaseNote.id == case_note_id)).unique().first()
        if not note:
            raise NotFoundError("Case note", case_note_id)
        return note

    def create_case_note(self, payload: CaseNoteCreate, caseworker_id: str) -> CaseNote:
        note = CaseNote(caseworker_id=caseworker_id, **payload.model_dump(mode="json"))
        self.db.add(note)
        self._commit("create case note")
        self.db.refresh(note)
        logger.info("Case note %s created by %s (%s)", note.id, caseworker_id, note.program_area)
        return note

    def update_case_note(self, case_note_id: int, changes: dict, user_id: str) -> CaseNote:
        note = self.get_case_note(case_note_id)
        ensure_author(note, user_id, "edit")
        try:
            payload = CaseNoteUpdate.model_validate(changes)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e

        for field, value in payload.model_dump(mode="json", exclude_unset=True).items():
            setattr(note, field, value)
        note.updated_at = datetime.now()
        self._commit("update case note")
        self.db.refresh(note)
        logger.info("Case note %s updated by %s", note.id, user_id)
        return note

    def delete_case_note(self, case_note_id: int, user_id: str):
        """
        Delete a note and its attachments in one transaction, then remove the
        attachment bytes. A blob that cannot be removed is left as an orphan.
        """
        note = self.get_case_note(case_note_id)
        ensure_author(note, user_id, "delete")

        stored_names: List[str] = [a.file_name for a in note.attachments]
        self.db.delete(note)
        self._commit("delete case note")
        logger.info("Case note %s deleted by %s with %d attachment(s)", case_note_id, user_id, len(stored_names))

        for name in stored_names:
            self._remove_blob(name)

    def _remove_blob(self, stored_name: str):
        if self.storage is None:
            logger.warning("No attachment storage configured; leaving %s on storage", stored_name)
            return
        try:
            self.storage.delete(stored_name)
        except StorageError as e:
            logger.error("Orphaned attachment blob %s: %s", stored_name, e.detail or e.message)

    def _commit(self, action: str):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Failed to {action}", detail=str(e)) from e
