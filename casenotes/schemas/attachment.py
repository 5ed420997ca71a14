# casenotes/schemas/attachment.py
from datetime import datetime
from casenotes.schemas.common import CamelModel


class AttachmentOut(CamelModel):
    id: int
    case_note_id: int
    file_name: str
    original_name: str
    mime_type: str
    file_size: int
    uploaded_at: datetime


class RejectedFile(CamelModel):
    original_name: str
    message: str

