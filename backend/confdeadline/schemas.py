from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, StrictBool, StrictStr, field_validator
from pydantic.alias_generators import to_camel


class Category(str, Enum):
    COMPUTER_SCIENCE = "computer-science"
    ENGINEERING = "engineering"
    MEDICINE = "medicine"
    BUSINESS = "business"
    SOCIAL_SCIENCES = "social-sciences"
    OTHER = "other"


class Status(str, Enum):
    PLANNED = "planned"
    SUBMITTED = "submitted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    ATTENDED = "attended"


class SortKey(str, Enum):
    NAME = "name"
    LOCATION = "location"
    SUBMISSION_DATE = "submissionDate"
    CONFERENCE_START_DATE = "conferenceStartDate"


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class CamelModel(BaseModel):
    # JSON 필드명은 프론트 포맷(camelCase) 그대로
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =========================
# Conference
# =========================
class ConferenceCandidate(CamelModel):
    model_config = ConfigDict(frozen=True)

    name: str
    location: str
    website: Optional[str] = None
    category: Category = Category.OTHER
    submission_date: date
    notification_date: date
    conference_start_date: date
    conference_end_date: date
    status: Status = Status.PLANNED
    notes: Optional[str] = None

    @field_validator("name", "location", mode="before")
    @classmethod
    def _strip_required(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("website", "notes", mode="before")
    @classmethod
    def _strip_optional(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip() or None
        return v

    # 폼에서 select 미선택("")이면 기본값
    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, v: Any) -> Any:
        return v or Category.OTHER

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, v: Any) -> Any:
        return v or Status.PLANNED


class ConferenceRecord(ConferenceCandidate):
    id: str
    created_at: datetime
    updated_at: datetime

    # naive 타임스탬프는 UTC로 간주
    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)


class Countdown(CamelModel):
    days: int
    text: str
    urgent: bool


class ConferenceCard(ConferenceRecord):
    status_label: str
    category_label: str
    submission_display: str
    notification_display: str
    conference_dates_display: str
    countdown: Countdown
    upcoming: bool
    active: bool


# =========================
# Filters / Stats
# =========================
class FilterConfig(CamelModel):
    model_config = ConfigDict(frozen=True)

    search: str = ""
    sort_by: SortKey = SortKey.NAME
    show_upcoming: StrictBool = True
    show_past: StrictBool = True
    show_active: StrictBool = True


# 필터 부분 수정 body: camelCase / snake_case 둘 다 받음, "false" 같은 문자열은 422
class SearchText(CamelModel):
    search: StrictStr = ""


class SortChoice(CamelModel):
    sort_by: SortKey = SortKey.NAME


class VisibilityToggles(CamelModel):
    # None이면 현재 값 유지
    show_upcoming: Optional[StrictBool] = None
    show_past: Optional[StrictBool] = None
    show_active: Optional[StrictBool] = None


class Stats(CamelModel):
    total: int
    upcoming_deadlines: int
    active: int


# =========================
# JSON document (editor / export / local storage)
# =========================
class ConferenceDocument(CamelModel):
    version: str = "1.0"
    last_updated: datetime
    conferences: List[ConferenceRecord]


class DocumentText(BaseModel):
    text: str


class Notification(CamelModel):
    message: str
    severity: Severity
    created_at: datetime


class NewConferenceForm(CamelModel):
    submission_date: date
    notification_date: Optional[date] = None
    conference_start_date: Optional[date] = None
    conference_end_date: Optional[date] = None
    category: Category = Category.OTHER
    status: Status = Status.PLANNED
    choices: Dict[str, List[str]]
