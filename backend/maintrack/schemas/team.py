from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .common import EquipmentBrief, UserBrief

class TeamCreate(BaseModel):
    Name: str = Field(min_length=2, max_length=100)
    Description_s: Optional[str] = None
    MemberIDs: List[int] = []

class TeamUpdate(BaseModel):
    Name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    Description_s: Optional[str] = None
    IsActive: Optional[bool] = None
    MemberIDs: Optional[List[int]] = None

class MemberAdd(BaseModel):
    UserID: int

class TeamRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    TeamID: int
    Name: str
    Description_s: Optional[str] = None
    IsActive: bool
    CreatedAt: Optional[datetime] = None
    members: List[UserBrief] = []

class OpenRequestBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    RequestID: int
    Subject: str
    Status_s: str
    RequestType: str
    AssignedToID: Optional[int] = None

class TeamDetail(TeamRead):
    open_requests: List[OpenRequestBrief] = []
    default_for_equipment: List[EquipmentBrief] = []
