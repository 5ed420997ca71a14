# casenotes/services/authorization.py
import logging
from casenotes.core.exceptions import AuthorizationError
from casenotes.models.case_note import CaseNote

logger = logging.getLogger(__name__)


def ensure_author(note: CaseNote, user_id: str, action: str = "modify"):
    """Only the caseworker who wrote a note may change it or its attachments."""
    if note.caseworker_id != user_id:
        logger.warning("User %s tried to %s case note %s owned by %s",
                       user_id, action, note.id, note.caseworker_id)
        raise AuthorizationError(f"Not authorized to {action} this case note")
