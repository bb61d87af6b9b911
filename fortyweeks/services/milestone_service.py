"""Gestational week math, the standard milestone catalog, and persisted milestones."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from fortyweeks.core.exceptions import NotFoundError
from fortyweeks.db.enums import MILESTONE_TYPE_LABELS, MilestoneCategory, MilestoneType
from fortyweeks.db.models import Milestone, Pregnancy
from fortyweeks.utils.datetime_parsing import utc_now


PREGNANCY_LENGTH_DAYS = 280
LMP_OFFSET_DAYS = 14
FULL_TERM_WEEK = 40


# =============================================================================
# Week calculator
# =============================================================================

def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def weeks_since(start: date, now: date | datetime, offset_days: int = 0) -> int:
    """floor((days elapsed + offset_days) / 7) + 1, with floor also for negatives."""
    days = (_as_date(now) - start).days
    return (days + offset_days) // 7 + 1


def calculate_current_week(
    due_date: date,
    conception_date: date | None = None,
    now: date | datetime | None = None,
) -> int:
    """
    Current gestational week.

    With a conception date, counts from conception plus the 14-day LMP
    offset. Otherwise estimates conception as due_date - 280 days. The
    result is not clamped: values <= 0 or > 42 are returned as-is.
    """
    now = now or utc_now()
    if conception_date is not None:
        return weeks_since(conception_date, now, LMP_OFFSET_DAYS)
    estimate = due_date - timedelta(days=PREGNANCY_LENGTH_DAYS)
    return weeks_since(estimate, now)


def calculate_update_week(
    update_date: date | datetime,
    conception_date: date | None,
) -> int | None:
    """Week tag for an update; None without a conception date or when not positive."""
    if conception_date is None:
        return None
    week = weeks_since(conception_date, update_date, LMP_OFFSET_DAYS)
    return week if week > 0 else None


def weeks_remaining(due_date: date, now: date | datetime | None = None) -> int:
    """Whole weeks until the due date, rounded up; 0 once due."""
    today = _as_date(now or utc_now())
    if due_date <= today:
        return 0
    return ((due_date - today).days + 6) // 7


def is_overdue(due_date: date, now: date | datetime | None = None) -> bool:
    return _as_date(now or utc_now()) > due_date


# =============================================================================
# Milestone catalog
# =============================================================================

@dataclass(frozen=True)
class CatalogEntry:
    week: int
    title: str
    description: str
    category: MilestoneCategory


@dataclass
class MilestoneInfo:
    week: int
    title: str
    description: str
    type: str
    date: date
    is_past: bool
    is_current: bool

    def to_dict(self) -> dict:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data


_A = MilestoneCategory.APPOINTMENT
_D = MilestoneCategory.DEVELOPMENT
_M = MilestoneCategory.MILESTONE

MILESTONE_CATALOG: tuple[CatalogEntry, ...] = (
    CatalogEntry(8, "First Prenatal Visit", "Confirm pregnancy and establish care", _A),
    CatalogEntry(10, "Baby's Heart Starts Beating", "Baby's heart begins to beat", _D),
    CatalogEntry(12, "12-Week Scan", "First ultrasound and genetic screening", _A),
    CatalogEntry(14, "Second Trimester Begins", "Morning sickness often improves", _M),
    CatalogEntry(16, "Gender Reveal Possible", "Sex can often be determined", _D),
    CatalogEntry(18, "Anatomy Scan Prep", "Prepare for detailed ultrasound", _A),
    CatalogEntry(20, "20-Week Anatomy Scan", "Detailed ultrasound examination", _A),
    CatalogEntry(20, "Halfway Point!", "You're halfway through pregnancy", _M),
    CatalogEntry(22, "Baby's Movements", "You may start feeling kicks", _D),
    CatalogEntry(24, "Viability Milestone", "Baby can survive outside womb", _M),
    CatalogEntry(26, "Glucose Screening", "Test for gestational diabetes", _A),
    CatalogEntry(28, "Third Trimester Begins", "Final pregnancy phase starts", _M),
    CatalogEntry(28, "28-Week Checkup", "Regular monitoring increases", _A),
    CatalogEntry(32, "32-Week Checkup", "Monitor baby's growth and position", _A),
    CatalogEntry(34, "Baby Shower Time", "Celebrate with friends and family", _M),
    CatalogEntry(36, "36-Week Checkup", "Weekly visits often begin", _A),
    CatalogEntry(37, "Full Term!", "Baby is considered full term", _M),
    CatalogEntry(38, "38-Week Checkup", "Final preparations", _A),
    CatalogEntry(39, "39-Week Checkup", "Any day now!", _A),
    CatalogEntry(40, "Due Date", "Your estimated due date", _M),
    CatalogEntry(41, "Post-Due Checkup", "Monitor if past due date", _A),
)


def milestone_date(week: int, due_date: date, conception_date: date | None = None) -> date:
    if conception_date is not None:
        return conception_date + timedelta(days=(week - 1) * 7 - LMP_OFFSET_DAYS)
    return due_date - timedelta(days=(FULL_TERM_WEEK - week) * 7)


def generate_milestones(
    due_date: date,
    current_week: int,
    conception_date: date | None = None,
) -> list[MilestoneInfo]:
    """Standard catalog with dates and past/current flags; always 21 entries."""
    return [
        MilestoneInfo(
            week=entry.week,
            title=entry.title,
            description=entry.description,
            type=entry.category.value,
            date=milestone_date(entry.week, due_date, conception_date),
            is_past=entry.week < current_week,
            is_current=entry.week == current_week,
        )
        for entry in MILESTONE_CATALOG
    ]


# =============================================================================
# Persisted milestones
# =============================================================================

# (type, title, days from due date, week)
DEFAULT_MILESTONES: tuple[tuple[MilestoneType, str, int, int], ...] = (
    (MilestoneType.FIRST_APPOINTMENT, "First Doctor Appointment", -245, 8),
    (MilestoneType.WEEK_12_SCAN, "12 Week Scan", -196, 12),
    (MilestoneType.WEEK_20_SCAN, "20 Week Anatomy Scan", -140, 20),
    (MilestoneType.WEEK_36_APPOINTMENT, "36 Week Appointment", -42, 36),
    (MilestoneType.DUE_DATE, "Due Date", 0, 40),
)


def create_default_milestones(db: Session, pregnancy_id: int, due_date: date) -> list[Milestone]:
    """Add the five default milestones. Flushes only; caller owns the transaction."""
    milestones = [
        Milestone(
            pregnancy_id=pregnancy_id,
            milestone_type=milestone_type.value,
            title=title,
            scheduled_date=due_date + timedelta(days=offset),
            week_number=week,
        )
        for milestone_type, title, offset, week in DEFAULT_MILESTONES
    ]
    db.add_all(milestones)
    db.flush()
    return milestones


def reschedule_default_milestones(db: Session, pregnancy_id: int, due_date: date) -> None:
    """Move uncompleted default milestones after a due date change."""
    offsets = {mt.value: offset for mt, _, offset, _ in DEFAULT_MILESTONES}
    milestones = (
        db.query(Milestone)
        .filter(
            Milestone.pregnancy_id == pregnancy_id,
            Milestone.milestone_type.in_(offsets.keys()),
            Milestone.is_completed.is_(False),
        )
        .all()
    )
    for milestone in milestones:
        milestone.scheduled_date = due_date + timedelta(days=offsets[milestone.milestone_type])
    db.flush()


def list_milestones(db: Session, pregnancy_id: int) -> list[Milestone]:
    return (
        db.query(Milestone)
        .filter(Milestone.pregnancy_id == pregnancy_id)
        .order_by(Milestone.scheduled_date.asc(), Milestone.id.asc())
        .all()
    )


def get_milestone(db: Session, pregnancy_id: int, milestone_id: int) -> Milestone:
    milestone = (
        db.query(Milestone)
        .filter(Milestone.id == milestone_id, Milestone.pregnancy_id == pregnancy_id)
        .first()
    )
    if not milestone:
        raise NotFoundError("Milestone not found")
    return milestone


def update_milestone(
    db: Session,
    milestone: Milestone,
    *,
    is_completed: bool | None = None,
    scheduled_date: date | None = None,
    notes: str | None = None,
) -> bool:
    """
    Apply edits to a persisted milestone.

    Returns True when the milestone flipped from open to completed.
    """
    newly_completed = False
    if is_completed is not None and is_completed != milestone.is_completed:
        milestone.is_completed = is_completed
        milestone.completed_date = _as_date(utc_now()) if is_completed else None
        newly_completed = is_completed
    if scheduled_date is not None:
        milestone.scheduled_date = scheduled_date
    if notes is not None:
        milestone.notes = notes or None
    db.flush()
    return newly_completed


def display_title(milestone: Milestone) -> str:
    return MILESTONE_TYPE_LABELS.get(milestone.milestone_type, milestone.title)


def status_text(milestone: Milestone, today: date | None = None) -> str:
    """Completed / Not Scheduled / Overdue / Today / Tomorrow / In N days."""
    if milestone.is_completed:
        return "Completed"
    if milestone.scheduled_date is None:
        return "Not Scheduled"
    today = today or _as_date(utc_now())
    days = (milestone.scheduled_date - today).days
    if days < 0:
        return "Overdue"
    if days == 0:
        return "Today"
    if days == 1:
        return "Tomorrow"
    return f"In {days} days"


def pregnancy_current_week(pregnancy: Pregnancy, now: date | datetime | None = None) -> int:
    return calculate_current_week(pregnancy.due_date, pregnancy.conception_date, now)
