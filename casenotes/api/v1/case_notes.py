# casenotes/api/v1/case_notes.py
import json
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends, File, Query, Response, UploadFile, status
from sqlalchemy.orm import Session
from casenotes.core.dependencies import get_attachment_storage, get_current_user, get_db
from casenotes.schemas.attachment import AttachmentOut, RejectedFile
from casenotes.schemas.case_note import (
    CaseNoteCreate,
    CaseNoteFilters,
    CaseNoteListOut,
    CaseNoteOut,
    CaseNoteWithDetails,
)
from casenotes.services.attachment_service import AttachmentService
from casenotes.services.case_note_service import CaseNoteService

router = APIRouter()


@router.get("", response_model=CaseNoteListOut)
def list_case_notes(
    program_area: Optional[str] = Query(None, alias="programArea"),
    search: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    # kept as strings: bad paging values fall back to defaults instead of 400
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    _=Depends(get_current_user),
):
    """
    Search case notes. Returns one page plus the total number of matches.
    """
    filters = CaseNoteFilters.from_query(
        program_area=program_area,
        search=search,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        limit=limit,
        offset=offset,
    )
    return CaseNoteService(db).list_case_notes(filters)


@router.get("/{case_note_id}", response_model=CaseNoteWithDetails)
def get_case_note(case_note_id: int, db: Session = Depends(get_db), _=Depends(get_current_user)):
    return CaseNoteService(db).get_case_note(case_note_id)


@router.post("", response_model=CaseNoteOut, status_code=status.HTTP_201_CREATED)
def create_case_note(payload: CaseNoteCreate, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    # authorship always comes from the session, never the body
    return CaseNoteService(db).create_case_note(payload, caseworker_id=current_user.id)


@router.put("/{case_note_id}", response_model=CaseNoteOut)
def update_case_note(
    case_note_id: int,
    # raw body: existence and authorship are checked before field validation
    changes: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return CaseNoteService(db).update_case_note(case_note_id, changes, user_id=current_user.id)


@router.delete("/{case_note_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_case_note(
    case_note_id: int,
    db: Session = Depends(get_db),
    storage=Depends(get_attachment_storage),
    current_user=Depends(get_current_user),
):
    CaseNoteService(db, storage).delete_case_note(case_note_id, user_id=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{case_note_id}/attachments", response_model=List[AttachmentOut])
def list_attachments(
    case_note_id: int,
    db: Session = Depends(get_db),
    storage=Depends(get_attachment_storage),
    _=Depends(get_current_user),
):
    return AttachmentService(db, storage).list_for(case_note_id)


@router.post("/{case_note_id}/attachments", response_model=List[AttachmentOut], status_code=status.HTTP_201_CREATED)
async def upload_attachments(
    case_note_id: int,
    response: Response,
    files: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    storage=Depends(get_attachment_storage),
    current_user=Depends(get_current_user),
):
    svc = AttachmentService(db, storage)
    created, rejected = await svc.upload(case_note_id, files or [], user_id=current_user.id)
    if rejected:
        # body stays the list of created rows; skipped files are reported alongside
        response.headers["X-Rejected-Files"] = json.dumps(
            [RejectedFile(**r).model_dump(by_alias=True) for r in rejected]
        )
    return created
