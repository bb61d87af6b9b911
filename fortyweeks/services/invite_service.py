"""Invite links - reversible pregnancy tokens and joining a village."""

from __future__ import annotations

import logging
import re

from sqlalchemy.orm import Session

from fortyweeks.core.exceptions import InvalidInviteHash
from fortyweeks.db.enums import VillagerJoinSource
from fortyweeks.db.models import Pregnancy, VillageMember
from fortyweeks.services import pregnancy_service, village_service

logger = logging.getLogger(__name__)

# Obfuscation only: anyone who knows this constant can enumerate pregnancies.
INVITE_SECRET = 0x40202024
INVITE_HASH_PATTERN = re.compile(r"^[0-9a-fA-F]{8}$")


def encode_invite_hash(pregnancy_id: int) -> str:
    return f"{pregnancy_id ^ INVITE_SECRET:08x}"


def decode_invite_hash(token: str) -> int:
    """
    Reverse encode_invite_hash.

    Raises:
        InvalidInviteHash: Token is not exactly 8 hex characters
    """
    if not token or not INVITE_HASH_PATTERN.match(token):
        raise InvalidInviteHash("Invalid or expired invite")
    return int(token, 16) ^ INVITE_SECRET


def resolve_invite_pregnancy(db: Session, token: str) -> Pregnancy:
    """
    Decode a token and load its active pregnancy.

    Raises:
        InvalidInviteHash: Malformed token, unknown pregnancy, or inactive pregnancy
    """
    pregnancy_id = decode_invite_hash(token)
    pregnancy = pregnancy_service.get_pregnancy(db, pregnancy_id)
    if not pregnancy or not pregnancy.is_active:
        logger.info("Invite token did not resolve to an active pregnancy")
        raise InvalidInviteHash("Invalid or expired invite")
    return pregnancy


def invite_info(pregnancy: Pregnancy) -> dict:
    """Public summary shown on the join page."""
    return {
        "parent_names": pregnancy_service.parent_names(pregnancy),
        "baby_name": pregnancy_service.display_baby_name(pregnancy),
        "due_date": pregnancy.due_date.isoformat(),
    }


def join_via_invite(
    db: Session,
    token: str,
    name: str | None,
    emails: list[str] | None,
    relationship: str | None,
    is_told: bool = False,
) -> list[VillageMember]:
    """
    Add the visitor (one row per email) to the pregnancy behind the token.

    Raises:
        InvalidInviteHash: Token does not resolve
        ValueError: Missing fields or an empty email
        ConflictError: An email is already in this village
    """
    pregnancy = resolve_invite_pregnancy(db, token)
    return village_service.add_members(
        db,
        pregnancy,
        name,
        emails,
        relationship,
        is_told,
        source=VillagerJoinSource.INVITE,
    )
