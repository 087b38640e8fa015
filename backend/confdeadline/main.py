import logging
import threading
from datetime import date
from typing import List, Optional

import structlog
from fastapi import FastAPI, Depends, Header, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware

from . import db
from .clock import Clock, SystemClock
from .config import get_admin_password, get_settings
from .db import init_db
from .errors import DocumentError, NotFoundError, ValidationError
from .persistence import LocalStorage, PersistenceAdapter
from .query import days_until, is_active, is_upcoming
from .schemas import (
    ConferenceCandidate,
    ConferenceCard,
    ConferenceDocument,
    ConferenceRecord,
    DocumentText,
    FilterConfig,
    NewConferenceForm,
    Notification,
    SearchText,
    SortChoice,
    Stats,
    VisibilityToggles,
)
from .services import ConferenceTrackerService, RecordingPresenter
from .templates import CATEGORY_LABELS, STATUS_LABELS
from .utils import format_date, to_date_obj

logging.basicConfig(format="%(message)s", level=get_settings().log_level)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

EXPORT_FILENAME = "conferences.json"


def require_admin(got_pw: str | None):
    expected = get_admin_password()
    if not expected:
        raise HTTPException(500, "ADMIN_PASSWORD is not set on server (.env not loaded)")
    if not got_pw or got_pw.strip() != expected:
        raise HTTPException(401, "Invalid admin password")


def parse_today(v: Optional[str]) -> Optional[date]:
    try:
        return to_date_obj(v)
    except ValueError:
        raise HTTPException(400, "today must be YYYY-MM-DD")


# -----------------------
# Service wiring
# -----------------------
_service: Optional[ConferenceTrackerService] = None
_service_lock = threading.Lock()


def build_service(engine=None, http_client=None, clock: Optional[Clock] = None) -> ConferenceTrackerService:
    settings = get_settings()
    clock = clock or SystemClock()
    persistence = PersistenceAdapter(
        LocalStorage(engine or db.engine),
        storage_key=settings.storage_key,
        snapshot_url=settings.snapshot_url,
        http_client=http_client,
        timeout=settings.http_timeout,
        clock=clock,
    )
    service = ConferenceTrackerService(
        persistence,
        RecordingPresenter(clock),
        clock=clock,
        github_repo=settings.github_repo,
    )
    service.load()
    return service


def get_service() -> ConferenceTrackerService:
    global _service
    with _service_lock:
        if _service is None:
            _service = build_service()
        return _service


def to_card(record: ConferenceRecord, today: date) -> ConferenceCard:
    return ConferenceCard(
        **record.model_dump(),
        status_label=STATUS_LABELS.get(record.status.value, record.status.value),
        category_label=CATEGORY_LABELS.get(record.category.value, record.category.value),
        submission_display=format_date(record.submission_date),
        notification_display=format_date(record.notification_date),
        conference_dates_display=(
            f"{format_date(record.conference_start_date)} - {format_date(record.conference_end_date)}"
        ),
        countdown=days_until(record.submission_date, today),
        upcoming=is_upcoming(record, today),
        active=is_active(record),
    )


app = FastAPI(title="Conference Deadline Tracker")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("database_initialized", db_url=get_settings().db_url)


# -----------------------
# Conferences
# -----------------------
@app.get("/conferences", response_model=List[ConferenceCard])
def list_conferences(today: Optional[str] = None, service: ConferenceTrackerService = Depends(get_service)):
    day = parse_today(today) or service.clock.today()
    return [to_card(r, day) for r in service.current_view(day)]


@app.get("/conferences/new", response_model=NewConferenceForm)
def new_conference_form(service: ConferenceTrackerService = Depends(get_service)):
    return service.new_form()


@app.get("/conferences/{cid}", response_model=ConferenceRecord)
def get_conference(cid: str, service: ConferenceTrackerService = Depends(get_service)):
    try:
        return service.get(cid)
    except NotFoundError:
        raise HTTPException(404, "Conference not found")


@app.post("/conferences", response_model=ConferenceRecord)
def create_conference(payload: ConferenceCandidate, service: ConferenceTrackerService = Depends(get_service)):
    try:
        return service.add(payload)
    except ValidationError as e:
        raise HTTPException(400, e.message)


@app.put("/conferences/{cid}", response_model=ConferenceRecord)
def update_conference(cid: str, payload: ConferenceCandidate,
                      service: ConferenceTrackerService = Depends(get_service)):
    try:
        return service.edit(cid, payload)
    except ValidationError as e:
        raise HTTPException(400, e.message)
    except NotFoundError:
        raise HTTPException(404, "Conference not found")


@app.delete("/conferences/{cid}")
def delete_conference(cid: str, service: ConferenceTrackerService = Depends(get_service)):
    if not service.delete(cid):
        raise HTTPException(404, "Conference not found")
    return {"ok": True}


# -----------------------
# Filters / stats
# -----------------------
@app.get("/filters", response_model=FilterConfig)
def get_filters(service: ConferenceTrackerService = Depends(get_service)):
    return service.filters


@app.put("/filters", response_model=FilterConfig)
def put_filters(config: FilterConfig, service: ConferenceTrackerService = Depends(get_service)):
    return service.set_filters(config)


@app.put("/filters/search", response_model=FilterConfig)
def put_search(body: SearchText, service: ConferenceTrackerService = Depends(get_service)):
    return service.set_search(body.search)


@app.put("/filters/sort", response_model=FilterConfig)
def put_sort(body: SortChoice, service: ConferenceTrackerService = Depends(get_service)):
    return service.set_sort(body.sort_by)


@app.put("/filters/visibility", response_model=FilterConfig)
def put_visibility(body: VisibilityToggles, service: ConferenceTrackerService = Depends(get_service)):
    current = service.filters
    return service.set_visibility_toggles(
        upcoming=current.show_upcoming if body.show_upcoming is None else body.show_upcoming,
        past=current.show_past if body.show_past is None else body.show_past,
        active=current.show_active if body.show_active is None else body.show_active,
    )


@app.get("/stats", response_model=Stats)
def get_stats(today: Optional[str] = None, service: ConferenceTrackerService = Depends(get_service)):
    return service.stats(parse_today(today))


@app.post("/refresh")
def refresh(service: ConferenceTrackerService = Depends(get_service)):
    result = service.refresh()
    return {"ok": True, "tier": result.tier.value, "count": len(result.records)}


# -----------------------
# JSON editor / export
# -----------------------
@app.get("/data", response_model=ConferenceDocument)
def get_document(service: ConferenceTrackerService = Depends(get_service)):
    return service.document()


@app.post("/data/format")
def format_document(body: DocumentText, service: ConferenceTrackerService = Depends(get_service)):
    try:
        return {"text": service.format_document(body.text)}
    except DocumentError as e:
        raise HTTPException(400, e.message)


@app.post("/data/validate")
def validate_document(body: DocumentText, service: ConferenceTrackerService = Depends(get_service)):
    try:
        records = service.validate_document(body.text)
    except (DocumentError, ValidationError) as e:
        raise HTTPException(400, e.message)
    return {"ok": True, "count": len(records)}


@app.put("/data")
def replace_document(
    body: DocumentText,
    service: ConferenceTrackerService = Depends(get_service),
    admin_pw: str | None = Header(default=None, alias="X-Admin-Password"),
):
    require_admin(admin_pw)
    try:
        records = service.replace_document(body.text)
    except (DocumentError, ValidationError) as e:
        raise HTTPException(400, e.message)
    return {"ok": True, "count": len(records)}


@app.get("/export")
def export_conferences(service: ConferenceTrackerService = Depends(get_service)):
    return Response(
        content=service.export_json(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@app.get("/github-edit-url")
def github_edit_url(service: ConferenceTrackerService = Depends(get_service)):
    return {"url": service.github_edit_url()}


# -----------------------
# Notifications
# -----------------------
@app.get("/notifications", response_model=List[Notification])
def list_notifications(service: ConferenceTrackerService = Depends(get_service)):
    presenter = service.presenter
    if isinstance(presenter, RecordingPresenter):
        return presenter.drain()
    return []
