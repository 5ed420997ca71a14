# casenotes/schemas/user.py
from typing import Optional
from datetime import datetime
from casenotes.schemas.common import CamelModel


class UserOut(CamelModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: str
    created_at: datetime
    updated_at: datetime


class CaseworkerSummary(CamelModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
