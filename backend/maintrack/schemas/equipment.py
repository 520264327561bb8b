from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from .common import TeamBrief, UserBrief

class EquipmentCreate(BaseModel):
    Name: str = Field(min_length=2, max_length=200)
    SerialNumber: str = Field(min_length=1, max_length=100)
    Category: str = Field(min_length=1, max_length=50)
    Department: str = Field(min_length=1, max_length=50)
    Location: str = Field(min_length=1, max_length=200)
    AssignedEmployeeID: Optional[int] = None
    DefaultTeamID: Optional[int] = None
    PurchaseDate: Optional[date] = None
    WarrantyExpiry: Optional[date] = None

class EquipmentUpdate(BaseModel):
    Name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    SerialNumber: Optional[str] = Field(default=None, min_length=1, max_length=100)
    Category: Optional[str] = None
    Department: Optional[str] = None
    Location: Optional[str] = None
    AssignedEmployeeID: Optional[int] = None
    DefaultTeamID: Optional[int] = None
    PurchaseDate: Optional[date] = None
    WarrantyExpiry: Optional[date] = None

class EquipmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    EquipmentID: int
    Name: str
    SerialNumber: str
    Category: str
    Department: str
    Location: str
    AssignedEmployeeID: Optional[int] = None
    DefaultTeamID: Optional[int] = None
    PurchaseDate: Optional[date] = None
    WarrantyExpiry: Optional[date] = None
    IsScrap: bool
    CreatedAt: Optional[datetime] = None
    assigned_employee: Optional[UserBrief] = None
    default_team: Optional[TeamBrief] = None
