# casenotes/models/user.py
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from casenotes.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)  # subject id from the identity provider
    email = Column(String, unique=True, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    profile_image_url = Column(String, nullable=True)
    role = Column(String, nullable=False, default="caseworker")
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)
