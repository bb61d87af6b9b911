"""Village router - members who follow the owner's pregnancy."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from fortyweeks.core.deps import get_active_pregnancy, get_current_session, get_db
from fortyweeks.core.exceptions import status_code_for
from fortyweeks.db.models import Pregnancy
from fortyweeks.schemas.auth import UserSession
from fortyweeks.schemas.village import (
    VillageMemberCreate,
    VillageMemberEdit,
    VillageMemberRead,
    VillageMembersBulkCreate,
    VillageMembersResponse,
    VillageStatsRead,
)
from fortyweeks.services import village_service

router = APIRouter(prefix="/api/village-members", tags=["village"])


@router.get("", response_model=list[VillageMemberRead])
def list_members(
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    """Members in the order they were added."""
    return village_service.list_members(db, pregnancy.id)


@router.post("", response_model=VillageMemberRead, status_code=201)
def add_member(
    body: VillageMemberCreate,
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    try:
        member = village_service.add_member(
            db, pregnancy, body.name, body.email, body.relationship, body.is_told
        )
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))
    db.commit()
    return member


@router.post("/bulk", response_model=VillageMembersResponse, status_code=201)
def add_members_bulk(
    body: VillageMembersBulkCreate,
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    """One member per email sharing a name; nobody is added if any email conflicts."""
    try:
        members = village_service.add_members(
            db, pregnancy, body.name, body.emails, body.relationship, body.is_told
        )
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))
    db.commit()
    return VillageMembersResponse(members=[VillageMemberRead.model_validate(m) for m in members])


@router.get("/stats", response_model=VillageStatsRead)
def get_stats(
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    return village_service.get_stats(db, pregnancy.id).to_dict()


@router.put("/{member_id}", response_model=VillageMemberRead)
def update_member(
    member_id: int,
    body: VillageMemberEdit,
    session: UserSession = Depends(get_current_session),
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    """Set the told flag."""
    try:
        member = village_service.get_owned_member(db, pregnancy, member_id)
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))

    village_service.set_told(db, pregnancy, member, body.is_told, session.user_id)
    db.commit()
    db.refresh(member)
    return member


@router.delete("/{member_id}", status_code=204)
def delete_member(
    member_id: int,
    pregnancy: Pregnancy = Depends(get_active_pregnancy),
    db: Session = Depends(get_db),
):
    try:
        member = village_service.get_owned_member(db, pregnancy, member_id)
    except ValueError as e:
        raise HTTPException(status_code=status_code_for(e), detail=str(e))

    village_service.delete_member(db, member)
    db.commit()
    return Response(status_code=204)
