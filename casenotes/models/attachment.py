# casenotes/models/attachment.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from casenotes.db.base import Base


class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, index=True)
    case_note_id = Column(Integer, ForeignKey("case_notes.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String, nullable=False)  # storage key, never user supplied
    original_name = Column(String, nullable=False)
    mime_type = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)
    uploaded_at = Column(DateTime, default=datetime.now, nullable=False)

    case_note = relationship("CaseNote", back_populates="attachments")
