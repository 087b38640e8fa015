import json
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, List, Optional

import httpx
import pydantic
import structlog
from sqlalchemy.engine import Engine
from sqlmodel import Session

from .clock import Clock, SystemClock
from .errors import DocumentError, PersistenceError
from .models import StorageEntry, utcnow
from .schemas import ConferenceDocument, ConferenceRecord
from .templates import SAMPLE_CONFERENCES

logger = structlog.get_logger(__name__)

DOCUMENT_VERSION = "1.0"


class LoadTier(str, Enum):
    REMOTE = "remote"
    LOCAL = "local"
    DEFAULTS = "defaults"


@dataclass(frozen=True)
class LoadResult:
    records: List[ConferenceRecord]
    tier: LoadTier


# -----------------------
# Local storage (localStorage 대체)
# -----------------------
class LocalStorage:
    def __init__(self, engine: Engine):
        self.engine = engine

    def get_item(self, key: str) -> Optional[str]:
        with Session(self.engine) as session:
            entry = session.get(StorageEntry, key)
            return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        # row 하나를 통째로 교체 (한 트랜잭션)
        with Session(self.engine) as session:
            entry = session.get(StorageEntry, key)
            if entry is None:
                entry = StorageEntry(key=key, value=value)
            else:
                entry.value = value
                entry.updated_at = utcnow()
            session.add(entry)
            session.commit()


# -----------------------
# Document parsing
# -----------------------
def parse_document_text(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentError(f"Invalid JSON: {e.msg}", details={"line": e.lineno, "column": e.colno}) from e


def records_from_document(
    data: Any,
    clock: Clock,
    *,
    allow_bare_list: bool = False,
    skip_invalid: bool = False,
) -> List[ConferenceRecord]:
    # skip_invalid: 깨진 레코드만 버리고 나머지는 살림 (local tier)
    if allow_bare_list and isinstance(data, list):
        raw = data
    elif isinstance(data, dict) and isinstance(data.get("conferences"), list):
        raw = data["conferences"]
    else:
        raise DocumentError('JSON must have a "conferences" array')

    now = clock.now()
    records = []
    seen = set()
    for index, item in enumerate(raw):
        try:
            record = _record_from_item(index, item, now)
            if record.id in seen:
                raise DocumentError(f"Duplicate conference id: {record.id}", details={"index": index})
        except DocumentError as e:
            if not skip_invalid:
                raise
            logger.warning("conference_skipped", index=index, reason=e.message)
            continue
        seen.add(record.id)
        records.append(record)
    return records


def _record_from_item(index: int, item: Any, now: datetime) -> ConferenceRecord:
    if not isinstance(item, dict):
        raise DocumentError(f"Conference #{index + 1} is not an object", details={"index": index})
    item = dict(item)
    if not item.get("id"):
        item["id"] = uuid.uuid4().hex
    elif not isinstance(item["id"], str):
        # 옛 데이터: 숫자 id
        item["id"] = str(item["id"])
    item.setdefault("createdAt", now)
    item.setdefault("updatedAt", item["createdAt"])
    try:
        return ConferenceRecord.model_validate(item)
    except pydantic.ValidationError as e:
        raise DocumentError(
            f"Conference #{index + 1} is invalid: {e.errors()[0]['msg']}",
            details={"index": index},
        ) from e


def build_document(records: List[ConferenceRecord], clock: Clock) -> ConferenceDocument:
    return ConferenceDocument(version=DOCUMENT_VERSION, last_updated=clock.now(), conferences=records)


def dump_document(document: ConferenceDocument, indent: Optional[int] = None) -> str:
    return document.model_dump_json(by_alias=True, indent=indent)


def build_sample_records(today: date, clock: Clock) -> List[ConferenceRecord]:
    now = clock.now()
    out = []
    for sample in SAMPLE_CONFERENCES:
        fields = {k: v for k, v in sample.items() if k != "relative_days"}
        for field, offset in sample["relative_days"].items():
            fields[field] = today + timedelta(days=offset)
        out.append(ConferenceRecord.model_validate({
            **fields,
            "id": uuid.uuid4().hex,
            "createdAt": now,
            "updatedAt": now,
        }))
    return out


# -----------------------
# Adapter
# -----------------------
class PersistenceAdapter:
    def __init__(
        self,
        storage: LocalStorage,
        *,
        storage_key: str,
        snapshot_url: str = "",
        http_client: Optional[httpx.Client] = None,
        timeout: float = 5.0,
        clock: Optional[Clock] = None,
    ):
        self.storage = storage
        self.storage_key = storage_key
        self.snapshot_url = snapshot_url
        self.http_client = http_client
        self.timeout = timeout
        self.clock = clock or SystemClock()

    def load(self) -> LoadResult:
        result = None
        for tier, loader in (
            (LoadTier.REMOTE, self.fetch_remote),
            (LoadTier.LOCAL, self.read_local),
        ):
            try:
                result = LoadResult(records=loader(), tier=tier)
                break
            except PersistenceError as e:
                logger.warning("load_tier_failed", tier=tier.value, reason=e.details.get("reason"))

        if result is None:
            result = LoadResult(records=build_sample_records(self.clock.today(), self.clock), tier=LoadTier.DEFAULTS)

        # ✅ 어느 tier든 성공하면 바로 local에 미러링
        self.save(result.records)
        logger.info("conferences_loaded", tier=result.tier.value, count=len(result.records))
        return result

    def save(self, records: List[ConferenceRecord]) -> None:
        blob = dump_document(build_document(list(records), self.clock))
        self.storage.set_item(self.storage_key, blob)

    def fetch_remote(self) -> List[ConferenceRecord]:
        if not self.snapshot_url:
            raise PersistenceError(LoadTier.REMOTE.value, "no snapshot url configured")

        # cache-busting 파라미터
        params = {"t": int(self.clock.now().timestamp() * 1000)}
        try:
            if self.http_client is not None:
                response = self.http_client.get(self.snapshot_url, params=params, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.get(self.snapshot_url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise PersistenceError(LoadTier.REMOTE.value, str(e)) from e
        except ValueError as e:
            raise PersistenceError(LoadTier.REMOTE.value, f"invalid JSON: {e}") from e

        try:
            return records_from_document(data, self.clock)
        except DocumentError as e:
            raise PersistenceError(LoadTier.REMOTE.value, e.message) from e

    def read_local(self) -> List[ConferenceRecord]:
        stored = self.storage.get_item(self.storage_key)
        if not stored:
            raise PersistenceError(LoadTier.LOCAL.value, "nothing stored")
        try:
            records = records_from_document(
                parse_document_text(stored), self.clock, allow_bare_list=True, skip_invalid=True
            )
        except DocumentError as e:
            raise PersistenceError(LoadTier.LOCAL.value, e.message) from e
        if not records:
            raise PersistenceError(LoadTier.LOCAL.value, "stored list is empty")
        return records
