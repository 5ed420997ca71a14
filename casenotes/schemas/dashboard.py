# casenotes/schemas/dashboard.py
from casenotes.schemas.common import CamelModel


class DashboardStats(CamelModel):
    total_notes: int
    today_notes: int
    rca_cases: int
    translations_provided: int
