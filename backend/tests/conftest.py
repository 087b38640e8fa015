"""
Test configuration and fixtures
"""

from datetime import datetime, timezone
from itertools import count
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from confdeadline.clock import FixedClock
from confdeadline.db import init_db
from confdeadline.main import app, get_service
from confdeadline.persistence import LocalStorage, PersistenceAdapter
from confdeadline.schemas import ConferenceCandidate, ConferenceRecord
from confdeadline.services import ConferenceTrackerService, RecordingPresenter

STORAGE_KEY = "test_conference_data"
SNAPSHOT_URL = "https://example.org/data/conferences.json"

# 2025-03-01 (토) 정오 UTC
FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def unreachable_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("snapshot host unreachable", request=request)

    return httpx.MockTransport(handler)


@pytest.fixture
def clock():
    return FixedClock(FIXED_NOW)


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def storage(engine):
    return LocalStorage(engine)


@pytest.fixture
def offline_http():
    with httpx.Client(transport=unreachable_transport()) as client:
        yield client


@pytest.fixture
def persistence(storage, offline_http, clock):
    return PersistenceAdapter(
        storage,
        storage_key=STORAGE_KEY,
        snapshot_url=SNAPSHOT_URL,
        http_client=offline_http,
        clock=clock,
    )


@pytest.fixture
def presenter(clock):
    return RecordingPresenter(clock)


@pytest.fixture
def service(persistence, presenter, clock):
    """Service loaded from the built-in samples (remote unreachable, storage empty)"""
    svc = ConferenceTrackerService(
        persistence, presenter, clock=clock, github_repo="octo/conference-tracker"
    )
    svc.load()
    presenter.drain()
    return svc


@pytest.fixture
def client(service):
    """Test client wired to the fixture service"""
    with patch("confdeadline.main.init_db"):
        app.dependency_overrides[get_service] = lambda: service
        with TestClient(app) as test_client:
            yield test_client
        app.dependency_overrides.clear()


@pytest.fixture
def make_candidate():
    """Build a valid candidate; overrides use the JSON (camelCase) field names"""

    def _make(**overrides) -> ConferenceCandidate:
        data = {
            "name": "Symposium on Software Testing",
            "location": "Lisbon, Portugal",
            "website": "https://sst.example.org",
            "category": "computer-science",
            "submissionDate": "2025-06-01",
            "notificationDate": "2025-07-01",
            "conferenceStartDate": "2025-09-01",
            "conferenceEndDate": "2025-09-05",
            "status": "planned",
            "notes": "Tool paper track",
        }
        data.update(overrides)
        return ConferenceCandidate.model_validate(data)

    return _make


@pytest.fixture
def make_record(make_candidate):
    ids = count(1)

    def _make(**overrides) -> ConferenceRecord:
        candidate = make_candidate(**overrides)
        return ConferenceRecord.model_validate({
            **candidate.model_dump(),
            "id": overrides.get("id") or f"conf-{next(ids)}",
            "created_at": FIXED_NOW,
            "updated_at": FIXED_NOW,
        })

    return _make


@pytest.fixture
def sample_document():
    """Remote snapshot payload"""
    return {
        "version": "1.0",
        "lastUpdated": "2025-02-20T08:00:00Z",
        "conferences": [
            {
                "id": "neurips",
                "name": "NeurIPS",
                "location": "Vancouver, Canada",
                "category": "computer-science",
                "submissionDate": "2025-05-15",
                "notificationDate": "2025-09-25",
                "conferenceStartDate": "2025-12-09",
                "conferenceEndDate": "2025-12-15",
                "status": "planned",
                "createdAt": "2025-01-10T09:00:00Z",
                "updatedAt": "2025-01-10T09:00:00Z",
            },
            {
                "id": "miccai",
                "name": "MICCAI",
                "location": "Daejeon, Korea",
                "category": "medicine",
                "submissionDate": "2025-02-26",
                "notificationDate": "2025-06-17",
                "conferenceStartDate": "2025-09-23",
                "conferenceEndDate": "2025-09-27",
                "status": "submitted",
                "notes": "Segmentation paper",
                "createdAt": "2025-01-11T09:00:00Z",
                "updatedAt": "2025-02-27T09:00:00Z",
            },
        ],
    }
