# casenotes/schemas/case_note.py
import enum
from datetime import date, datetime, time
from typing import List, Optional

from pydantic import field_validator

from casenotes.core.config import settings
from casenotes.core.exceptions import ValidationError
from casenotes.models.case_note import ProgramArea
from casenotes.schemas.attachment import AttachmentOut
from casenotes.schemas.common import CamelModel
from casenotes.schemas.user import CaseworkerSummary


class CaseNoteCreate(CamelModel):
    program_area: ProgramArea
    translation_provided: bool
    narrative: str

    @field_validator("narrative")
    @classmethod
    def narrative_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Narrative is required")
        return v


class CaseNoteUpdate(CamelModel):
    """Partial update. Fields left out are untouched; explicit nulls are rejected."""

    program_area: Optional[ProgramArea] = None
    translation_provided: Optional[bool] = None
    narrative: Optional[str] = None

    @field_validator("program_area", "translation_provided", "narrative")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field may not be null")
        return v

    @field_validator("narrative")
    @classmethod
    def narrative_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Narrative is required")
        return v


class CaseNoteOut(CamelModel):
    id: int
    program_area: str
    caseworker_id: str
    translation_provided: bool
    narrative: str
    created_at: datetime
    updated_at: datetime


class CaseNoteWithDetails(CaseNoteOut):
    caseworker: Optional[CaseworkerSummary] = None
    attachments: List[AttachmentOut] = []


class CaseNoteListOut(CamelModel):
    notes: List[CaseNoteWithDetails]
    total: int


class SortBy(str, enum.Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    PROGRAM = "program"
    CASEWORKER = "caseworker"


def _parse_window_int(raw: Optional[str], default: int) -> int:
    # missing, non-numeric or negative input falls back instead of failing
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 0 else default


def _parse_datetime(raw: str, field: str, end_of_day: bool = False) -> datetime:
    raw = raw.strip()
    try:
        if len(raw) == 10:
            day = date.fromisoformat(raw)
            return datetime.combine(day, time.max if end_of_day else time.min)
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        value = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"Invalid date: {raw!r}", field=field)
    if value.tzinfo is not None:
        # stored timestamps are naive local time
        value = value.astimezone().replace(tzinfo=None)
    return value


class CaseNoteFilters(CamelModel):
    program_area: Optional[ProgramArea] = None
    search: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    sort_by: SortBy = SortBy.NEWEST
    limit: int = settings.DEFAULT_PAGE_SIZE
    offset: int = 0

    @classmethod
    def from_query(
        cls,
        program_area: Optional[str] = None,
        search: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        sort_by: Optional[str] = None,
        limit: Optional[str] = None,
        offset: Optional[str] = None,
    ) -> "CaseNoteFilters":
        """
        Build filters from raw query-string values.

        Empty strings mean "no filter". Unknown program areas, unknown sort keys
        and unparseable dates raise ValidationError; bad paging values default.
        """
        errors = []

        area = None
        if program_area:
            try:
                area = ProgramArea(program_area)
            except ValueError:
                errors.append({"field": "programArea", "message": f"Unknown program area: {program_area}"})

        order = SortBy.NEWEST
        if sort_by:
            try:
                order = SortBy(sort_by)
            except ValueError:
                errors.append({"field": "sortBy", "message": f"Unknown sort key: {sort_by}"})

        start = end = None
        try:
            if start_date:
                start = _parse_datetime(start_date, "startDate")
            if end_date:
                end = _parse_datetime(end_date, "endDate", end_of_day=True)
        except ValidationError as e:
            errors.extend(e.errors)

        if errors:
            raise ValidationError("Invalid filters", errors=errors)

        page_size = _parse_window_int(limit, settings.DEFAULT_PAGE_SIZE) or settings.DEFAULT_PAGE_SIZE
        return cls(
            program_area=area,
            search=search or None,
            start_date=start,
            end_date=end,
            sort_by=order,
            limit=page_size,
            offset=_parse_window_int(offset, 0),
        )
