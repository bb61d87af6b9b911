"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fortyweeks.db.base import Base
from fortyweeks.utils.datetime_parsing import utc_now

if TYPE_CHECKING:
    from fortyweeks.db.models import (
        AccessRequest,
        PregnancyEvent,
        PregnancyUpdate,
        User,
        VillageMember,
    )


class Pregnancy(Base):
    """
    One tracked pregnancy.

    A user has at most one active pregnancy; rows are never hard-deleted.
    share_id is the public, non-guessable key for the read-only timeline.
    """

    __tablename__ = "pregnancies"
    __table_args__ = (
        # At most one active pregnancy per user.
        Index(
            "uq_pregnancies_user_active",
            "user_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    partner_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    partner_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    conception_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    current_week: Mapped[int] = mapped_column(
        Integer, server_default=text("1"), default=1, nullable=False
    )
    baby_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, server_default=text("1"), default=True, nullable=False
    )
    share_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    cover_photo_filename: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=text("CURRENT_TIMESTAMP"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now,
        onupdate=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    user: Mapped["User"] = relationship(back_populates="pregnancies")
    village_members: Mapped[list["VillageMember"]] = relationship(
        back_populates="pregnancy", cascade="all, delete-orphan"
    )
    access_requests: Mapped[list["AccessRequest"]] = relationship(
        back_populates="pregnancy", cascade="all, delete-orphan"
    )
    updates: Mapped[list["PregnancyUpdate"]] = relationship(
        back_populates="pregnancy", cascade="all, delete-orphan"
    )
    events: Mapped[list["PregnancyEvent"]] = relationship(
        back_populates="pregnancy", cascade="all, delete-orphan"
    )
    milestones: Mapped[list["Milestone"]] = relationship(
        back_populates="pregnancy",
        cascade="all, delete-orphan",
        order_by="Milestone.week_number",
    )


class Milestone(Base):
    """A scheduled checkpoint (scan, appointment, due date) with completion state."""

    __tablename__ = "milestones"
    __table_args__ = (
        Index("idx_milestones_pregnancy", "pregnancy_id", "week_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pregnancy_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pregnancies.id", ondelete="CASCADE"), nullable=False
    )
    milestone_type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    scheduled_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    completed_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_completed: Mapped[bool] = mapped_column(
        Boolean, server_default=text("0"), default=False, nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    week_number: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=text("CURRENT_TIMESTAMP"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now,
        onupdate=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    pregnancy: Mapped["Pregnancy"] = relationship(back_populates="milestones")
