"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fortyweeks.db.base import Base
from fortyweeks.utils.datetime_parsing import utc_now

if TYPE_CHECKING:
    from fortyweeks.db.models import Pregnancy, User


class PregnancyEvent(Base):
    """
    Immutable timeline entry (announcement, villager joined/told, ...).

    Append-only: rows are never updated or deleted by the application.
    """

    __tablename__ = "pregnancy_events"
    __table_args__ = (
        Index("idx_events_pregnancy", "pregnancy_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pregnancy_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pregnancies.id", ondelete="CASCADE"), nullable=False
    )
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_data: Mapped[dict | None] = mapped_column(nullable=True)
    week_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=text("CURRENT_TIMESTAMP"), nullable=False
    )

    pregnancy: Mapped["Pregnancy"] = relationship(back_populates="events")
    creator: Mapped[Optional["User"]] = relationship()
