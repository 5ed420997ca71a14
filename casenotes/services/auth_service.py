# casenotes/services/auth_service.py
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from casenotes.core.exceptions import StorageError, ValidationError
from casenotes.models.user import User

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def upsert_user(
        self,
        user_id: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ) -> User:
        """
        Insert the user on first sight, otherwise refresh the claims the
        identity provider sent. Claims that were not sent are left alone.
        """
        claims = {
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "profile_image_url": profile_image_url,
        }
        claims = {k: v for k, v in claims.items() if v is not None}

        user = self.get_user(user_id)
        if user is None:
            user = User(id=user_id, **claims)
            self.db.add(user)
            logger.info("Registered user %s", user_id)
        else:
            changed = {k: v for k, v in claims.items() if getattr(user, k) != v}
            if not changed:
                return user
            for k, v in changed.items():
                setattr(user, k, v)
            user.updated_at = datetime.now()

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ValidationError("Email already belongs to another user", field="email") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Failed to save user", detail=str(e)) from e
        self.db.refresh(user)
        return user
