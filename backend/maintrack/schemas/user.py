from datetime import datetime
from typing import List, Optional, Literal
from pydantic import BaseModel, EmailStr, Field, ConfigDict

from .common import TeamBrief

RoleLiteral = Literal["requester", "technician", "manager", "admin"]
SelfRegisterRole = Literal["requester", "technician"]

class UserCreate(BaseModel):
    email: EmailStr
    full_name: str = Field(min_length=2, max_length=100)
    password: str = Field(min_length=6, max_length=72)
    role: Optional[SelfRegisterRole] = "requester"

class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    UserID: int
    Email: EmailStr
    FullName: str
    Role: RoleLiteral
    IsActive: bool
    CreatedAt: Optional[datetime] = None

class UserWithTeams(UserRead):
    teams: List[TeamBrief] = []

class RoleUpdate(BaseModel):
    Role: RoleLiteral

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
