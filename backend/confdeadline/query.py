from datetime import date
from typing import Iterable, List, Optional

from .schemas import (
    ConferenceRecord,
    Countdown,
    FilterConfig,
    SortKey,
    Stats,
    Status,
)
from .utils import collation_key

ACTIVE_STATUSES = frozenset({Status.SUBMITTED, Status.ACCEPTED})
URGENT_WITHIN_DAYS = 7

_SORT_KEYS = {
    SortKey.NAME: lambda r: collation_key(r.name),
    SortKey.LOCATION: lambda r: collation_key(r.location),
    SortKey.SUBMISSION_DATE: lambda r: r.submission_date,
    SortKey.CONFERENCE_START_DATE: lambda r: r.conference_start_date,
}


def matches_search(record: ConferenceRecord, search: str) -> bool:
    term = (search or "").casefold()
    if not term:
        return True
    return (
        term in record.name.casefold()
        or term in record.location.casefold()
        or (record.notes is not None and term in record.notes.casefold())
    )


def is_upcoming(record: ConferenceRecord, today: date) -> bool:
    return record.submission_date >= today


def is_active(record: ConferenceRecord) -> bool:
    return record.status in ACTIVE_STATUSES


def is_visible(record: ConferenceRecord, config: FilterConfig, today: date) -> bool:
    # upcoming/past는 날짜로 배타적, active는 별도 축 (둘 다 걸리면 둘 다 검사)
    upcoming = is_upcoming(record, today)
    if upcoming and not config.show_upcoming:
        return False
    if not upcoming and not config.show_past:
        return False
    if is_active(record) and not config.show_active:
        return False
    return True


def sort_records(records: Iterable[ConferenceRecord], sort_by: SortKey = SortKey.NAME) -> List[ConferenceRecord]:
    key = _SORT_KEYS.get(sort_by, _SORT_KEYS[SortKey.NAME])
    # sorted()는 stable
    return sorted(records, key=key)


def view(
    records: Iterable[ConferenceRecord],
    config: FilterConfig,
    today: Optional[date] = None,
) -> List[ConferenceRecord]:
    today = today or date.today()
    kept = [
        r for r in records
        if matches_search(r, config.search) and is_visible(r, config, today)
    ]
    return sort_records(kept, config.sort_by)


def days_until(target: date, today: Optional[date] = None) -> Countdown:
    # 자정 기준 일수 차이, 일주일 이내면 urgent
    today = today or date.today()
    days = (target - today).days
    if days < 0:
        return Countdown(days=days, text="Past", urgent=False)
    if days == 0:
        return Countdown(days=0, text="Today", urgent=True)
    if days == 1:
        return Countdown(days=1, text="1 day", urgent=True)
    return Countdown(days=days, text=f"{days} days", urgent=days <= URGENT_WITHIN_DAYS)


def compute_stats(records: Iterable[ConferenceRecord], today: Optional[date] = None) -> Stats:
    today = today or date.today()
    records = list(records)
    return Stats(
        total=len(records),
        upcoming_deadlines=sum(1 for r in records if is_upcoming(r, today)),
        active=sum(1 for r in records if is_active(r)),
    )
