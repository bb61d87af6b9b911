"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

from datetime import datetime

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.orm import relationship as orm_relationship  # "relationship" is a column name here

from fortyweeks.db.base import Base
from fortyweeks.db.enums import AccessRequestStatus
from fortyweeks.utils.datetime_parsing import utc_now

if TYPE_CHECKING:
    from fortyweeks.db.models import Pregnancy


class VillageMember(Base):
    """
    A person invited to follow a pregnancy.

    Emails are stored lowercased; (pregnancy_id, email) is unique.
    """

    __tablename__ = "village_members"
    __table_args__ = (
        UniqueConstraint("pregnancy_id", "email", name="uq_village_member_email"),
        Index("idx_village_members_pregnancy", "pregnancy_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pregnancy_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pregnancies.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    relationship: Mapped[str] = mapped_column(String(50), nullable=False)
    is_told: Mapped[bool] = mapped_column(
        Boolean, server_default=text("0"), default=False, nullable=False
    )
    told_date: Mapped[datetime | None] = mapped_column(nullable=True)
    is_subscribed: Mapped[bool] = mapped_column(
        Boolean, server_default=text("1"), default=True, nullable=False
    )
    unsubscribe_token: Mapped[str | None] = mapped_column(
        String(64), unique=True, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=text("CURRENT_TIMESTAMP"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now,
        onupdate=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    pregnancy: Mapped["Pregnancy"] = orm_relationship(back_populates="village_members")


class AccessRequest(Base):
    """
    Request from a non-member email to view a shared timeline.

    Resolved rows keep their final status (approved/denied) and resolved_at.
    """

    __tablename__ = "access_requests"
    __table_args__ = (
        Index("idx_access_requests_pending", "pregnancy_id", "status", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pregnancy_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pregnancies.id", ondelete="CASCADE"), nullable=False
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    relationship: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text(f"'{AccessRequestStatus.PENDING.value}'"),
        default=AccessRequestStatus.PENDING.value,
        nullable=False,
    )
    resolved_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=text("CURRENT_TIMESTAMP"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now,
        onupdate=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    pregnancy: Mapped["Pregnancy"] = orm_relationship(back_populates="access_requests")
