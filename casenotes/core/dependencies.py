# casenotes/core/dependencies.py
from typing import Generator
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from casenotes.core.config import settings
from casenotes.core.exceptions import AuthenticationError
from casenotes.db.session import SessionLocal
from casenotes.models.user import User
from casenotes.services.auth_service import AuthService
from casenotes.utils.storage import AttachmentStorage, get_storage


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


_storage = None


def get_attachment_storage() -> AttachmentStorage:
    # built lazily so importing the app does not touch disk or S3
    global _storage
    if _storage is None:
        _storage = get_storage()
    return _storage


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Resolve the caller from the identity headers set by the authenticating
    proxy in front of the service, registering or refreshing the user row.
    """
    user_id = (request.headers.get(settings.AUTH_USER_ID_HEADER) or "").strip()
    if not user_id:
        raise AuthenticationError()

    return AuthService(db).upsert_user(
        user_id,
        email=request.headers.get(settings.AUTH_EMAIL_HEADER) or None,
        first_name=request.headers.get(settings.AUTH_FIRST_NAME_HEADER) or None,
        last_name=request.headers.get(settings.AUTH_LAST_NAME_HEADER) or None,
    )
