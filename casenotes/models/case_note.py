# casenotes/models/case_note.py
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from sqlalchemy.orm import relationship, foreign
from casenotes.db.base import Base
from casenotes.models.user import User


class ProgramArea(str, enum.Enum):
    RCA = "RCA"
    MEDICAL = "Medical"
    SAS = "SAS"
    EMP = "EMP"
    ELI = "ELI"
    RMA = "RMA"


class CaseNote(Base):
    __tablename__ = "case_notes"

    id = Column(Integer, primary_key=True, index=True)
    program_area = Column(String(20), nullable=False, index=True)
    # no FK: notes outlive their caseworker's user row
    caseworker_id = Column(String, nullable=False, index=True)
    translation_provided = Column(Boolean, nullable=False)
    narrative = Column(Text, nullable=False)
    # local clock, same one the dashboard day window is computed from
    created_at = Column(DateTime, default=datetime.now, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    caseworker = relationship(
        User,
        primaryjoin=foreign(caseworker_id) == User.id,
        viewonly=True,
    )
    attachments = relationship(
        "Attachment",
        back_populates="case_note",
        cascade="all, delete-orphan",
        order_by="Attachment.id",
    )
