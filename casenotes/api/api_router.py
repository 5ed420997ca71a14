# casenotes/api/api_router.py
from fastapi import APIRouter
from casenotes.api.v1 import attachments, auth, case_notes, dashboard

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(case_notes.router, prefix="/case-notes", tags=["case-notes"])
api_router.include_router(attachments.router, prefix="/attachments", tags=["attachments"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
