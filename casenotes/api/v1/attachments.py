# casenotes/api/v1/attachments.py
from urllib.parse import quote
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from casenotes.core.dependencies import get_attachment_storage, get_current_user, get_db
from casenotes.services.attachment_service import AttachmentService

router = APIRouter()


@router.get("/{attachment_id}/download")
def download_attachment(
    attachment_id: int,
    db: Session = Depends(get_db),
    storage=Depends(get_attachment_storage),
    current_user=Depends(get_current_user),
):
    """
    Stream an attachment back to the author of its case note.
    """
    attachment, data = AttachmentService(db, storage).download(attachment_id, user_id=current_user.id)
    return Response(
        content=data,
        media_type=attachment.mime_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(attachment.original_name)}"
        },
    )


@router.delete("/{attachment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_attachment(
    attachment_id: int,
    db: Session = Depends(get_db),
    storage=Depends(get_attachment_storage),
    current_user=Depends(get_current_user),
):
    AttachmentService(db, storage).delete(attachment_id, user_id=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
