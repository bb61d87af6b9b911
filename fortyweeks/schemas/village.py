"""Pydantic schemas for village members and access requests."""

from datetime import datetime

from pydantic import BaseModel


class VillageMemberCreate(BaseModel):
    name: str = ""
    email: str = ""
    relationship: str = ""
    is_told: bool = False


class VillageMembersBulkCreate(BaseModel):
    """One member per email; used by bulk add and invite join."""

    name: str = ""
    emails: list[str] = []
    relationship: str = ""
    is_told: bool = False


class VillageMemberEdit(BaseModel):
    is_told: bool


class VillageMemberRead(BaseModel):
    id: int
    pregnancy_id: int
    name: str
    email: str
    relationship: str
    is_told: bool
    told_date: datetime | None = None
    is_subscribed: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class VillageMembersResponse(BaseModel):
    members: list[VillageMemberRead]


class JoinVillageResponse(BaseModel):
    success: bool
    members: list[VillageMemberRead]


class VillageStatsRead(BaseModel):
    total_members: int
    told_members: int
    subscribed_members: int
    pending_members: int


# =============================================================================
# Access requests
# =============================================================================

class AccessRequestCreate(BaseModel):
    email: str = ""
    name: str = ""
    relationship: str = ""
    message: str | None = None


class AccessRequestRead(BaseModel):
    id: int
    pregnancy_id: int
    email: str
    name: str
    relationship: str
    message: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AccessRequestCreated(BaseModel):
    message: str
    request: AccessRequestRead


class AccessRequestResolution(BaseModel):
    status: str
    action: str
    message: str


class VerifyAccessRequest(BaseModel):
    email: str = ""


class VerifyAccessResponse(BaseModel):
    has_access: bool
