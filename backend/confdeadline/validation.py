from typing import Iterable, List, TypeVar

from .errors import ValidationError
from .schemas import ConferenceCandidate

C = TypeVar("C", bound=ConferenceCandidate)

# (앞 날짜, 뒤 날짜, 실패 메시지): 이 순서대로 검사
DATE_ORDER = (
    ("submission_date", "notification_date",
     "Submission deadline must be before notification date!"),
    ("notification_date", "conference_start_date",
     "Notification date must be before conference start date!"),
    ("conference_start_date", "conference_end_date",
     "Conference start date must be before end date!"),
)


def validate(candidate: C) -> C:
    """
    Check a candidate before it reaches the store.

    Fails fast on the first violation: name, location, then the three date
    pairs. Equal dates are allowed at every boundary.
    """
    if not (candidate.name or "").strip():
        raise ValidationError("Conference name is required!", field="name")
    if not (candidate.location or "").strip():
        raise ValidationError("Conference location is required!", field="location")

    for earlier, later, reason in DATE_ORDER:
        if getattr(candidate, earlier) > getattr(candidate, later):
            raise ValidationError(reason, field=later)
    return candidate


def validate_all(candidates: Iterable[C]) -> List[C]:
    out = []
    for index, candidate in enumerate(candidates):
        try:
            out.append(validate(candidate))
        except ValidationError as exc:
            label = candidate.name or f"#{index + 1}"
            raise ValidationError(f"{label}: {exc.message}", field=exc.field, index=index) from exc
    return out
