"""Tests for gestational week math and the milestone catalog."""
from datetime import date, datetime, timedelta

from fortyweeks.services import milestone_service
from fortyweeks.services.milestone_service import (
    calculate_current_week,
    calculate_update_week,
    generate_milestones,
    is_overdue,
    milestone_date,
    weeks_remaining,
)


TODAY = date(2026, 3, 1)


def test_current_week_from_due_date():
    # Estimated conception is due_date - 280 days; 140 days elapsed => week 21.
    due = TODAY + timedelta(weeks=20)
    assert calculate_current_week(due, None, TODAY) == 21


def test_current_week_on_due_date_is_41():
    assert calculate_current_week(TODAY, None, TODAY) == 41


def test_current_week_prefers_conception_date():
    conception = TODAY - timedelta(days=70)
    # (70 + 14) // 7 + 1
    assert calculate_current_week(TODAY + timedelta(weeks=30), conception, TODAY) == 13


def test_current_week_is_not_clamped():
    due = TODAY + timedelta(days=300)
    assert calculate_current_week(due, None, TODAY) <= 0
    past_due = TODAY - timedelta(weeks=5)
    assert calculate_current_week(past_due, None, TODAY) > 42


def test_current_week_floors_negative_days():
    # 1 day before the estimated conception is still week 0, not week 1.
    due = TODAY + timedelta(days=281)
    assert calculate_current_week(due, None, TODAY) == 0


def test_current_week_accepts_datetime():
    due = TODAY + timedelta(weeks=20)
    now = datetime(TODAY.year, TODAY.month, TODAY.day, 23, 59)
    assert calculate_current_week(due, None, now) == 21


def test_update_week_requires_conception_date():
    assert calculate_update_week(datetime(2026, 3, 1), None) is None


def test_update_week_from_conception_date():
    conception = date(2026, 1, 1)
    assert calculate_update_week(datetime(2026, 1, 1, 12), conception) == 3
    assert calculate_update_week(datetime(2026, 1, 8), conception) == 4


def test_update_week_before_conception_is_none():
    conception = date(2026, 1, 1)
    assert calculate_update_week(datetime(2025, 12, 1), conception) is None


def test_weeks_remaining_rounds_up():
    assert weeks_remaining(TODAY + timedelta(days=8), TODAY) == 2
    assert weeks_remaining(TODAY + timedelta(days=7), TODAY) == 1
    assert weeks_remaining(TODAY, TODAY) == 0
    assert weeks_remaining(TODAY - timedelta(days=3), TODAY) == 0


def test_is_overdue():
    assert is_overdue(TODAY - timedelta(days=1), TODAY)
    assert not is_overdue(TODAY, TODAY)


def test_catalog_has_21_entries_with_dates():
    due = date(2026, 9, 1)
    milestones = generate_milestones(due, current_week=20)
    assert len(milestones) == 21
    assert [m.week for m in milestones] == sorted(m.week for m in milestones)

    due_entry = next(m for m in milestones if m.title == "Due Date")
    assert due_entry.date == due

    halfway = [m for m in milestones if m.week == 20]
    assert len(halfway) == 2
    assert all(m.is_current and not m.is_past for m in halfway)
    assert all(m.is_past for m in milestones if m.week < 20)


def test_milestone_date_uses_conception_when_known():
    conception = date(2026, 1, 1)
    # Week 1 starts 14 days before conception.
    assert milestone_date(1, date(2026, 9, 24), conception) == date(2025, 12, 18)
    assert milestone_date(40, date(2026, 9, 1)) == date(2026, 9, 1)


def test_catalog_entry_to_dict_has_iso_date():
    entry = generate_milestones(date(2026, 9, 1), current_week=1)[0]
    data = entry.to_dict()
    assert data["date"] == entry.date.isoformat()
    assert data["type"] == "appointment"


def test_status_text():
    class _Milestone:
        is_completed = False
        scheduled_date = None
        milestone_type = "custom"
        title = "Custom"

    m = _Milestone()
    assert milestone_service.status_text(m, TODAY) == "Not Scheduled"
    m.scheduled_date = TODAY
    assert milestone_service.status_text(m, TODAY) == "Today"
    m.scheduled_date = TODAY + timedelta(days=1)
    assert milestone_service.status_text(m, TODAY) == "Tomorrow"
    m.scheduled_date = TODAY + timedelta(days=9)
    assert milestone_service.status_text(m, TODAY) == "In 9 days"
    m.scheduled_date = TODAY - timedelta(days=1)
    assert milestone_service.status_text(m, TODAY) == "Overdue"
    m.is_completed = True
    assert milestone_service.status_text(m, TODAY) == "Completed"
