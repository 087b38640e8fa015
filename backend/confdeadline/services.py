import json
import threading
from collections import deque
from datetime import date, timedelta
from typing import Deque, List, Optional, Protocol

import structlog

from .clock import Clock, SystemClock
from .errors import DocumentError, NotFoundError, ValidationError
from .persistence import (
    LoadResult,
    LoadTier,
    PersistenceAdapter,
    build_document,
    dump_document,
    parse_document_text,
    records_from_document,
)
from .query import compute_stats, view
from .schemas import (
    Category,
    ConferenceCandidate,
    ConferenceDocument,
    ConferenceRecord,
    FilterConfig,
    NewConferenceForm,
    Notification,
    Severity,
    SortKey,
    Stats,
    Status,
)
from .store import ConferenceStore
from .templates import GITHUB_EDIT_URL, NEW_CONFERENCE_SUBMISSION_OFFSET_DAYS
from .validation import validate, validate_all

logger = structlog.get_logger(__name__)

TIER_MESSAGES = {
    LoadTier.REMOTE: "Data loaded from repository!",
    LoadTier.LOCAL: "Data loaded from local storage!",
    LoadTier.DEFAULTS: "Sample data initialized!",
}


# -----------------------
# Presenter (화면 쪽 콜백)
# -----------------------
class Presenter(Protocol):
    def render(self, view: List[ConferenceRecord]) -> None: ...

    def notify(self, message: str, severity: Severity) -> None: ...


class RecordingPresenter:
    """Keeps the last rendered view and a bounded queue of notifications."""

    def __init__(self, clock: Optional[Clock] = None, maxlen: int = 50):
        self.clock = clock or SystemClock()
        self.last_view: List[ConferenceRecord] = []
        self.notifications: Deque[Notification] = deque(maxlen=maxlen)

    def render(self, view: List[ConferenceRecord]) -> None:
        self.last_view = list(view)

    def notify(self, message: str, severity: Severity) -> None:
        self.notifications.append(
            Notification(message=message, severity=severity, created_at=self.clock.now())
        )

    def drain(self) -> List[Notification]:
        out = list(self.notifications)
        self.notifications.clear()
        return out


# -----------------------
# Service
# -----------------------
class ConferenceTrackerService:
    """
    Entry point for every user action.

    Owns the record store and the current FilterConfig. Mutations run under a
    lock, are validated before they touch the store, and re-render the view
    afterwards. Errors are reported through ``presenter.notify`` and then
    re-raised so the caller can abort.
    """

    def __init__(
        self,
        persistence: PersistenceAdapter,
        presenter: Presenter,
        *,
        clock: Optional[Clock] = None,
        github_repo: str = "",
    ):
        self.persistence = persistence
        self.presenter = presenter
        self.clock = clock or SystemClock()
        self.github_repo = github_repo
        self.filters = FilterConfig()
        self.store = ConferenceStore(clock=self.clock, on_change=self.persistence.save)
        self.last_tier: Optional[LoadTier] = None
        self._lock = threading.RLock()

    # -----------------------
    # Load / refresh
    # -----------------------
    def load(self) -> LoadResult:
        with self._lock:
            self.presenter.notify("Loading data...", Severity.INFO)
            result = self.persistence.load()
            # persistence.load()가 이미 local에 미러링함
            self.store.replace_all(result.records, persist=False)
            self.last_tier = result.tier
            self.presenter.notify(TIER_MESSAGES[result.tier], Severity.SUCCESS)
            self.rerender()
            return result

    def refresh(self) -> LoadResult:
        self.presenter.notify("Refreshing data from repository...", Severity.INFO)
        return self.load()

    # -----------------------
    # CRUD
    # -----------------------
    def list(self) -> List[ConferenceRecord]:
        return self.store.list()

    def get(self, conference_id: str) -> ConferenceRecord:
        return self.store.get(conference_id)

    def add(self, candidate: ConferenceCandidate) -> ConferenceRecord:
        with self._lock:
            self._validate_or_notify(candidate)
            record = self.store.insert(candidate)
            logger.info("conference_added", conference_id=record.id, name=record.name)
            self.presenter.notify("Conference added successfully!", Severity.SUCCESS)
            self.rerender()
            return record

    def edit(self, conference_id: str, candidate: ConferenceCandidate) -> ConferenceRecord:
        with self._lock:
            self._validate_or_notify(candidate)
            try:
                record = self.store.replace(conference_id, candidate)
            except NotFoundError as e:
                self.presenter.notify(e.message, Severity.ERROR)
                raise
            logger.info("conference_updated", conference_id=record.id)
            self.presenter.notify("Conference updated successfully!", Severity.SUCCESS)
            self.rerender()
            return record

    def delete(self, conference_id: str) -> bool:
        with self._lock:
            removed = self.store.remove(conference_id)
            if not removed:
                self.presenter.notify("Conference not found", Severity.ERROR)
                return False
            logger.info("conference_deleted", conference_id=conference_id)
            self.presenter.notify("Conference deleted successfully!", Severity.SUCCESS)
            self.rerender()
            return True

    def new_form(self) -> NewConferenceForm:
        return NewConferenceForm(
            submission_date=self.clock.today() + timedelta(days=NEW_CONFERENCE_SUBMISSION_OFFSET_DAYS),
            choices={
                "category": [c.value for c in Category],
                "status": [s.value for s in Status],
                "sortBy": [k.value for k in SortKey],
            },
        )

    # -----------------------
    # Filters / view
    # -----------------------
    def set_search(self, text: str) -> FilterConfig:
        return self.set_filters(self.filters.model_copy(update={"search": text or ""}))

    def set_sort(self, key: SortKey) -> FilterConfig:
        return self.set_filters(self.filters.model_copy(update={"sort_by": SortKey(key)}))

    def set_visibility_toggles(self, upcoming: bool, past: bool, active: bool) -> FilterConfig:
        return self.set_filters(self.filters.model_copy(update={
            "show_upcoming": upcoming,
            "show_past": past,
            "show_active": active,
        }))

    def set_filters(self, config: FilterConfig) -> FilterConfig:
        with self._lock:
            self.filters = config
            self.rerender()
            return self.filters

    def current_view(self, today: Optional[date] = None) -> List[ConferenceRecord]:
        return view(self.store.list(), self.filters, today or self.clock.today())

    def rerender(self) -> None:
        self.presenter.render(self.current_view())

    def stats(self, today: Optional[date] = None) -> Stats:
        return compute_stats(self.store.list(), today or self.clock.today())

    # -----------------------
    # JSON editor / export
    # -----------------------
    def document(self) -> ConferenceDocument:
        return build_document(self.store.list(), self.clock)

    def format_document(self, text: str) -> str:
        try:
            data = parse_document_text(text)
        except DocumentError as e:
            self.presenter.notify(e.message, Severity.ERROR)
            raise
        self.presenter.notify("JSON formatted successfully!", Severity.SUCCESS)
        return json.dumps(data, indent=2, ensure_ascii=False)

    def validate_document(self, text: str) -> List[ConferenceRecord]:
        try:
            records = records_from_document(parse_document_text(text), self.clock)
            validate_all(records)
        except (DocumentError, ValidationError) as e:
            self.presenter.notify(e.message, Severity.ERROR)
            raise
        self.presenter.notify("JSON is valid!", Severity.SUCCESS)
        return records

    def replace_document(self, text: str) -> List[ConferenceRecord]:
        """Bulk replace from the JSON editor; every record is re-validated first."""
        with self._lock:
            records = self.validate_document(text)
            self.store.replace_all(records)
            logger.info("conferences_replaced", count=len(records))
            self.presenter.notify("Data updated successfully!", Severity.SUCCESS)
            self.rerender()
            return records

    def export_json(self) -> str:
        return dump_document(self.document(), indent=2)

    def github_edit_url(self) -> Optional[str]:
        if not self.github_repo:
            self.presenter.notify("Go to your repository and edit data/conferences.json", Severity.INFO)
            return None
        return GITHUB_EDIT_URL.format(repo=self.github_repo)

    # -----------------------
    # internals
    # -----------------------
    def _validate_or_notify(self, candidate: ConferenceCandidate) -> None:
        try:
            validate(candidate)
        except ValidationError as e:
            self.presenter.notify(e.message, Severity.ERROR)
            raise
