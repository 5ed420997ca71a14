# casenotes/services/dashboard_service.py
from datetime import datetime, time, timedelta
from typing import Optional
from sqlalchemy import func, select
from sqlalchemy.orm import Session
from casenotes.models.case_note import CaseNote, ProgramArea
from casenotes.schemas.dashboard import DashboardStats


def day_window(now: datetime):
    """Local midnight to the next midnight around `now`."""
    start = datetime.combine(now.date(), time.min)
    return start, start + timedelta(days=1)


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def _count(self, *conditions) -> int:
        return self.db.scalar(select(func.count(CaseNote.id)).where(*conditions)) or 0

    def get_stats(self, caseworker_id: Optional[str] = None, now: Optional[datetime] = None) -> DashboardStats:
        # the window is fixed once so the three daily counters agree
        start, end = day_window(now or datetime.now())
        scope = [CaseNote.caseworker_id == caseworker_id] if caseworker_id else []
        today = [CaseNote.created_at >= start, CaseNote.created_at < end]

        return DashboardStats(
            total_notes=self._count(*scope),
            today_notes=self._count(*today, *scope),
            rca_cases=self._count(CaseNote.program_area == ProgramArea.RCA.value, *today, *scope),
            translations_provided=self._count(CaseNote.translation_provided.is_(True), *today, *scope),
        )
