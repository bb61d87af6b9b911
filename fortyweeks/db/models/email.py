"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fortyweeks.db.base import Base
from fortyweeks.db.enums import DeliveryStatus
from fortyweeks.utils.datetime_parsing import utc_now

if TYPE_CHECKING:
    from fortyweeks.db.models import Job, VillageMember


class EmailNotification(Base):
    """
    One queued or attempted email.

    Rows are written with status=pending when the email is enqueued; the
    worker fills in sent_at, ses_message_id and the final status.
    """

    __tablename__ = "email_notifications"
    __table_args__ = (
        Index("idx_email_notifications_pregnancy", "pregnancy_id", "created_at"),
        Index("idx_email_notifications_status", "delivery_status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pregnancy_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("pregnancies.id", ondelete="CASCADE"), nullable=True
    )
    village_member_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("village_members.id", ondelete="SET NULL"), nullable=True
    )
    update_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("pregnancy_updates.id", ondelete="SET NULL"), nullable=True
    )
    milestone_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("milestones.id", ondelete="SET NULL"), nullable=True
    )
    job_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True
    )

    to_email: Mapped[str] = mapped_column(String(255), nullable=False)
    to_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email_type: Mapped[str] = mapped_column(String(30), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    html_body: Mapped[str] = mapped_column(Text, nullable=False)
    text_body: Mapped[str] = mapped_column(Text, nullable=False)

    delivery_status: Mapped[str] = mapped_column(
        String(20),
        server_default=text(f"'{DeliveryStatus.PENDING.value}'"),
        default=DeliveryStatus.PENDING.value,
        nullable=False,
    )
    ses_message_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=text("CURRENT_TIMESTAMP"), nullable=False
    )

    village_member: Mapped[Optional["VillageMember"]] = relationship()
    job: Mapped[Optional["Job"]] = relationship()
