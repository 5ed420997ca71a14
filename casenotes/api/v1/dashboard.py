# casenotes/api/v1/dashboard.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from casenotes.core.dependencies import get_current_user, get_db
from casenotes.schemas.dashboard import DashboardStats
from casenotes.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    return DashboardService(db).get_stats(caseworker_id=current_user.id)
