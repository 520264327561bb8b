# maintrack/schemas/common.py
# Diğer şemalara gömülen kısa özetler (denormalize alanlar)
from typing import Optional
from pydantic import BaseModel, ConfigDict

class UserBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    UserID: int
    FullName: str
    Email: str
    Role: Optional[str] = None

class TeamBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    TeamID: int
    Name: str

class EquipmentBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    EquipmentID: int
    Name: str
    SerialNumber: str
    Category: str
    IsScrap: bool
