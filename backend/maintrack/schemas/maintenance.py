# maintrack/schemas/maintenance.py
from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, ConfigDict, Field

from .common import EquipmentBrief, TeamBrief, UserBrief

# Tek tip durum/tür kümesi
StatusLiteral = Literal["New", "InProgress", "Repaired", "Scrap"]
KindLiteral = Literal["Corrective", "Preventive"]

# ---- Requests ----
class RequestCreate(BaseModel):
    Subject: str = Field(min_length=5, max_length=200)
    Description_s: Optional[str] = None
    RequestType: KindLiteral
    EquipmentID: int = Field(..., ge=1)
    ScheduledDate: Optional[datetime] = None
    # verilmezse ekipmanın varsayılan takımından dolar
    TeamID: Optional[int] = Field(default=None, ge=1)
    AssignedToID: Optional[int] = Field(default=None, ge=1)

# şema alanı -> motor patch anahtarı
PATCH_KEYS = {
    "Subject": "subject",
    "Description_s": "description",
    "ScheduledDate": "scheduled_date",
    "AssignedToID": "assigned_to_id",
    "DurationHours": "duration_hours",
}

class RequestUpdate(BaseModel):
    Subject: Optional[str] = Field(default=None, min_length=5, max_length=200)
    Description_s: Optional[str] = None
    ScheduledDate: Optional[datetime] = None
    AssignedToID: Optional[int] = None
    DurationHours: Optional[float] = None

    def to_patch(self) -> dict:
        """Sadece gönderilen alanlar; açık null korunur."""
        sent = self.model_dump(exclude_unset=True)
        return {PATCH_KEYS[k]: v for k, v in sent.items()}

class StatusUpdate(BaseModel):
    Status_s: StatusLiteral
    DurationHours: Optional[float] = None

class AssignIn(BaseModel):
    TechnicianID: int = Field(..., ge=1)

class RequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    RequestID: int
    Subject: str
    Description_s: Optional[str] = None
    RequestType: KindLiteral
    Status_s: StatusLiteral
    EquipmentID: int
    TeamID: int
    AssignedToID: Optional[int] = None
    CreatedByID: int
    ScheduledDate: Optional[datetime] = None
    CompletedAt: Optional[datetime] = None
    DurationHours: Optional[float] = None
    CreatedAt: datetime
    UpdatedAt: datetime

    equipment: Optional[EquipmentBrief] = None
    team: Optional[TeamBrief] = None
    assigned_to: Optional[UserBrief] = None
    created_by: Optional[UserBrief] = None
