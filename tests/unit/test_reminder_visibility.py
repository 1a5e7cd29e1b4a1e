"""Unit tests for reminder visibility and date/time parsing."""

from datetime import datetime, timezone

import pytest
from fastapi import HTTPException

from fcm_hub.services.reminders import (
    combine_date_time,
    day_bounds,
    filter_for_viewer,
    parse_deadline,
)


ALICE = "11111111-1111-1111-1111-111111111111"
BOB = "22222222-2222-2222-2222-222222222222"


def reminder(rid, created_by=None, tags=(), completions=()):
    return {
        "id": rid,
        "created_by": created_by,
        "tags": list(tags),
        "completions": list(completions),
    }


@pytest.fixture
def reminders():
    return [
        reminder("own", created_by=ALICE),
        reminder("untagged", created_by=BOB),
        reminder("tagged-user", created_by=BOB, tags=[{"user_id": ALICE, "position": None}]),
        reminder("tagged-position", created_by=BOB, tags=[{"user_id": None, "position": "Engineer"}]),
        reminder("done", created_by=BOB, tags=[{"user_id": ALICE, "position": None}], completions=[{"user_id": ALICE}]),
    ]


class TestFilterForViewer:
    def test_no_viewer_returns_everything(self, reminders):
        assert len(filter_for_viewer(reminders, None, None)) == 5

    def test_user_sees_own_and_tagged_minus_completed(self, reminders):
        ids = [r["id"] for r in filter_for_viewer(reminders, ALICE, None)]
        assert ids == ["own", "tagged-user"]

    def test_position_tag_matches(self, reminders):
        ids = [r["id"] for r in filter_for_viewer(reminders, ALICE, "Engineer")]
        assert ids == ["own", "tagged-user", "tagged-position"]

    def test_untagged_reminder_only_visible_to_creator(self, reminders):
        ids = [r["id"] for r in filter_for_viewer(reminders, None, "Engineer")]
        assert "untagged" not in ids
        assert "untagged" in [r["id"] for r in filter_for_viewer(reminders, BOB, None)]

    def test_completion_by_other_user_does_not_hide(self, reminders):
        ids = [r["id"] for r in filter_for_viewer(reminders, BOB, None)]
        assert "done" in ids


class TestDateParsing:
    def test_combine_date_time_is_utc(self):
        assert combine_date_time("2024-05-01", "09:30") == datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "date_str, time_str, message",
        [
            ("05/01/2024", "09:30", "Invalid reminder date format. Expected YYYY-MM-DD"),
            ("2024-05-01", "9:30", "Invalid reminder time format. Expected HH:MM or HH:MM:SS"),
            ("2024-02-30", "09:30", "Invalid reminder date or time combination"),
        ],
    )
    def test_combine_date_time_rejects_bad_input(self, date_str, time_str, message):
        with pytest.raises(HTTPException) as exc:
            combine_date_time(date_str, time_str)
        assert exc.value.status_code == 400
        assert exc.value.detail == message

    def test_parse_deadline_ignores_garbage(self):
        assert parse_deadline("not a date") is None
        assert parse_deadline("") is None
        assert parse_deadline("2024-06-01T10:00:00Z") == datetime(2024, 6, 1, 10, tzinfo=timezone.utc)

    def test_day_bounds_cover_whole_day(self):
        start, end = day_bounds("2024-05-01")
        assert start == datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert end.date() == start.date()
        assert (end.hour, end.minute, end.second) == (23, 59, 59)
