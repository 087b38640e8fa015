import uuid
from typing import Callable, Iterable, List, Optional

from .clock import Clock, SystemClock
from .errors import NotFoundError
from .schemas import ConferenceCandidate, ConferenceRecord

OnChange = Callable[[List[ConferenceRecord]], None]


def new_conference_id() -> str:
    return uuid.uuid4().hex


class ConferenceStore:
    def __init__(
        self,
        records: Iterable[ConferenceRecord] = (),
        *,
        clock: Optional[Clock] = None,
        on_change: Optional[OnChange] = None,
        id_factory: Callable[[], str] = new_conference_id,
    ):
        self.clock = clock or SystemClock()
        self.on_change = on_change
        self.id_factory = id_factory
        self._records: List[ConferenceRecord] = list(records)

    def __len__(self) -> int:
        return len(self._records)

    def list(self) -> List[ConferenceRecord]:
        return list(self._records)

    def get(self, conference_id: str) -> ConferenceRecord:
        return self._records[self._index_of(conference_id)]

    def insert(self, candidate: ConferenceCandidate) -> ConferenceRecord:
        now = self.clock.now()
        record = ConferenceRecord.model_validate({
            **candidate.model_dump(exclude={"id", "created_at", "updated_at"}),
            "id": self._unique_id(),
            "created_at": now,
            "updated_at": now,
        })
        self._commit([*self._records, record])
        return record

    def replace(self, conference_id: str, candidate: ConferenceCandidate) -> ConferenceRecord:
        idx = self._index_of(conference_id)
        prior = self._records[idx]
        record = ConferenceRecord.model_validate({
            **candidate.model_dump(exclude={"id", "created_at", "updated_at"}),
            "id": prior.id,
            "created_at": prior.created_at,
            # 시계가 뒤로 가도 updated_at은 줄어들지 않음
            "updated_at": max(self.clock.now(), prior.updated_at),
        })
        records = list(self._records)
        records[idx] = record
        self._commit(records)
        return record

    def remove(self, conference_id: str) -> bool:
        try:
            idx = self._index_of(conference_id)
        except NotFoundError:
            return False
        self._commit(self._records[:idx] + self._records[idx + 1:])
        return True

    def replace_all(self, records: Iterable[ConferenceRecord], *, persist: bool = True) -> None:
        records = list(records)
        seen = set()
        for r in records:
            if r.id in seen:
                raise ValueError(f"duplicate conference id: {r.id}")
            seen.add(r.id)
        if persist:
            self._commit(records)
        else:
            self._records = records

    # -----------------------
    # internals
    # -----------------------
    def _index_of(self, conference_id: str) -> int:
        for idx, r in enumerate(self._records):
            if r.id == conference_id:
                return idx
        raise NotFoundError(conference_id)

    def _unique_id(self) -> str:
        existing = {r.id for r in self._records}
        new_id = self.id_factory()
        while new_id in existing:
            new_id = self.id_factory()
        return new_id

    def _commit(self, records: List[ConferenceRecord]) -> None:
        # 저장 성공 후에만 메모리 반영 (실패 시 이전 상태 유지)
        if self.on_change is not None:
            self.on_change(list(records))
        self._records = records
