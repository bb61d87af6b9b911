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
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fortyweeks.db.base import Base
from fortyweeks.db.enums import UpdateType
from fortyweeks.utils.datetime_parsing import utc_now

if TYPE_CHECKING:
    from fortyweeks.db.models import Pregnancy


class PregnancyUpdate(Base):
    """
    A user-authored post on the pregnancy timeline.

    week_number is derived from the conception date when the update is
    written. Only is_shared updates reach villagers and the public timeline.
    """

    __tablename__ = "pregnancy_updates"
    __table_args__ = (
        Index("idx_updates_pregnancy", "pregnancy_id", "update_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pregnancy_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pregnancies.id", ondelete="CASCADE"), nullable=False
    )
    week_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    update_type: Mapped[str] = mapped_column(
        String(30),
        server_default=text(f"'{UpdateType.GENERAL.value}'"),
        default=UpdateType.GENERAL.value,
        nullable=False,
    )
    appointment_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_shared: Mapped[bool] = mapped_column(
        Boolean, server_default=text("0"), default=False, nullable=False
    )
    shared_at: Mapped[datetime | None] = mapped_column(nullable=True)
    update_date: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=text("CURRENT_TIMESTAMP"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now,
        onupdate=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    pregnancy: Mapped["Pregnancy"] = relationship(back_populates="updates")
    photos: Mapped[list["UpdatePhoto"]] = relationship(
        back_populates="update",
        cascade="all, delete-orphan",
        order_by="UpdatePhoto.sort_order",
    )


class UpdatePhoto(Base):
    """Image or video attached to an update (videos reuse this table)."""

    __tablename__ = "update_photos"
    __table_args__ = (
        Index("idx_update_photos_update", "update_id", "sort_order"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    update_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pregnancy_updates.id", ondelete="CASCADE"), nullable=False
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(
        Integer, server_default=text("0"), default=0, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=text("CURRENT_TIMESTAMP"), nullable=False
    )

    update: Mapped["PregnancyUpdate"] = relationship(back_populates="photos")
