"""
Tests for filtering, sorting, countdowns and stats
"""

from datetime import date, timedelta

import pytest

from confdeadline.query import compute_stats, days_until, sort_records, view
from confdeadline.schemas import FilterConfig, SortKey
from confdeadline.utils import collation_key

TODAY = date(2025, 3, 1)


@pytest.fixture
def upcoming_and_past(make_record):
    a = make_record(
        id="A", name="Alpha Conf", submissionDate="2025-01-01", notificationDate="2025-02-01",
        status="planned",
    )
    b = make_record(id="B", name="Beta Conf", submissionDate="2025-06-01", status="submitted")
    return a, b


class TestVisibility:
    def test_past_hidden_upcoming_active_shown(self, upcoming_and_past):
        a, b = upcoming_and_past
        config = FilterConfig(show_upcoming=True, show_past=False, show_active=True)
        assert view([a, b], config, TODAY) == [b]

    def test_active_toggle_excludes_regardless_of_date(self, make_record):
        past_active = make_record(
            id="P", submissionDate="2025-01-10", notificationDate="2025-02-01", status="accepted",
        )
        config = FilterConfig(show_upcoming=True, show_past=True, show_active=False)
        assert view([past_active], config, TODAY) == []

    def test_upcoming_toggle_hides_upcoming_inactive(self, upcoming_and_past):
        a, b = upcoming_and_past
        config = FilterConfig(show_upcoming=False, show_past=True, show_active=True)
        assert view([a, b], config, TODAY) == [a]

    def test_submission_today_counts_as_upcoming(self, make_record):
        today_record = make_record(submissionDate="2025-03-01")
        config = FilterConfig(show_upcoming=False)
        assert view([today_record], config, TODAY) == []

    def test_all_toggles_off_hides_everything(self, upcoming_and_past):
        config = FilterConfig(show_upcoming=False, show_past=False, show_active=False)
        assert view(list(upcoming_and_past), config, TODAY) == []


class TestSearch:
    @pytest.mark.parametrize("term", ["beta", "LISBON", "tool PAPER"])
    def test_matches_name_location_notes_case_insensitively(self, upcoming_and_past, term):
        _, b = upcoming_and_past
        config = FilterConfig(search=term)
        assert b in view([b], config, TODAY)

    def test_no_match(self, upcoming_and_past):
        config = FilterConfig(search="nowhere")
        assert view(list(upcoming_and_past), config, TODAY) == []

    def test_missing_notes_do_not_match(self, make_record):
        record = make_record(notes=None)
        assert view([record], FilterConfig(search="tool"), TODAY) == []

    def test_view_is_idempotent(self, make_record):
        records = [
            make_record(name="Gamma", submissionDate="2025-02-01", notificationDate="2025-02-02"),
            make_record(name="alpha"),
            make_record(name="Beta", status="accepted"),
        ]
        config = FilterConfig(search="a", sort_by=SortKey.NAME, show_past=False)
        once = view(records, config, TODAY)
        assert view(once, config, TODAY) == once


class TestSorting:
    def test_name_sort_uses_collation(self, make_record):
        records = [make_record(name=n) for n in ["beta", "Éclair", "Alpha", "delta"]]
        ordered = [r.name for r in sort_records(records, SortKey.NAME)]
        assert ordered == ["Alpha", "beta", "delta", "Éclair"]
        keys = [collation_key(n) for n in ordered]
        assert keys == sorted(keys)

    def test_location_sort(self, make_record):
        records = [make_record(location=loc) for loc in ["Tokyo", "athens", "Berlin"]]
        assert [r.location for r in sort_records(records, SortKey.LOCATION)] == ["athens", "Berlin", "Tokyo"]

    @pytest.mark.parametrize(
        "key, attr", [
            (SortKey.SUBMISSION_DATE, "submission_date"),
            (SortKey.CONFERENCE_START_DATE, "conference_start_date"),
        ],
    )
    def test_date_sorts_are_chronological(self, make_record, key, attr):
        records = [
            make_record(submissionDate="2025-05-01", conferenceStartDate="2025-10-01"),
            make_record(submissionDate="2025-04-01", conferenceStartDate="2025-11-01"),
            make_record(submissionDate="2025-06-01", conferenceStartDate="2025-09-10"),
        ]
        values = [getattr(r, attr) for r in sort_records(records, key)]
        assert values == sorted(values)

    def test_sort_is_stable_on_ties(self, make_record):
        first = make_record(id="first", name="Same")
        second = make_record(id="second", name="Same")
        assert [r.id for r in sort_records([first, second], SortKey.NAME)] == ["first", "second"]

    def test_default_sort_is_name(self, make_record):
        records = [make_record(name="Zulu"), make_record(name="Echo")]
        assert [r.name for r in view(records, FilterConfig(), TODAY)] == ["Echo", "Zulu"]


class TestDaysUntil:
    @pytest.mark.parametrize(
        "offset, text, urgent",
        [
            (-1, "Past", False),
            (0, "Today", True),
            (1, "1 day", True),
            (2, "2 days", True),
            (7, "7 days", True),
            (8, "8 days", False),
            (30, "30 days", False),
        ],
    )
    def test_countdown(self, offset, text, urgent):
        countdown = days_until(TODAY + timedelta(days=offset), TODAY)
        assert countdown.text == text
        assert countdown.urgent is urgent
        assert countdown.days == offset


class TestStats:
    def test_counts(self, upcoming_and_past, make_record):
        accepted_past = make_record(
            submissionDate="2025-01-05", notificationDate="2025-02-01", status="accepted",
        )
        stats = compute_stats([*upcoming_and_past, accepted_past], TODAY)
        assert stats.total == 3
        assert stats.upcoming_deadlines == 1
        assert stats.active == 2

    def test_empty(self):
        stats = compute_stats([], TODAY)
        assert (stats.total, stats.upcoming_deadlines, stats.active) == (0, 0, 0)
