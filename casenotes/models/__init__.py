# casenotes/models/__init__.py
from casenotes.models.user import User
from casenotes.models.case_note import CaseNote, ProgramArea
from casenotes.models.attachment import Attachment

__all__ = ["User", "CaseNote", "ProgramArea", "Attachment"]
