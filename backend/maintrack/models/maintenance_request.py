from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, CheckConstraint, Index, text
from sqlalchemy.orm import relationship
from ..core.db import Base
from ..core.clock import utcnow
from ..domain.constants import ALLOWED_KINDS, ALLOWED_STATUSES, STATUS_NEW

def _in_list(col: str, values) -> str:
    return f"{col} in (" + ",".join(f"'{v}'" for v in values) + ")"

class MaintenanceRequest(Base):
    __tablename__ = "MaintenanceRequest"

    RequestID     = Column(Integer, primary_key=True, autoincrement=True)
    Subject       = Column(String(200), nullable=False)
    Description_s = Column(String(2000))
    RequestType   = Column(String(20), nullable=False)
    Status_s      = Column(String(20), nullable=False, server_default=text("'New'"), default=STATUS_NEW)
    EquipmentID   = Column(Integer, ForeignKey("Equipment.EquipmentID"), nullable=False)
    TeamID        = Column(Integer, ForeignKey("MaintenanceTeam.TeamID"), nullable=False)
    AssignedToID  = Column(Integer, ForeignKey("AppUser.UserID"))
    CreatedByID   = Column(Integer, ForeignKey("AppUser.UserID"), nullable=False)
    ScheduledDate = Column(DateTime)
    CompletedAt   = Column(DateTime)
    DurationHours = Column(Float)
    CreatedAt     = Column(DateTime, nullable=False, default=utcnow)
    UpdatedAt     = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    # optimistic concurrency sayacı (aynı satıra eşzamanlı yazma -> StaleDataError)
    Version       = Column(Integer, nullable=False, server_default=text("1"))

    __table_args__ = (
        CheckConstraint(_in_list("Status_s", ALLOWED_STATUSES), name="CK_Request_Status"),
        CheckConstraint(_in_list("RequestType", ALLOWED_KINDS), name="CK_Request_Type"),
        CheckConstraint("DurationHours IS NULL OR DurationHours > 0", name="CK_Request_Duration_Positive"),
        Index("IX_Request_Team_Status", "TeamID", "Status_s"),
        Index("IX_Request_Assignee", "AssignedToID"),
        Index("IX_Request_Scheduled", "ScheduledDate"),
    )

    __mapper_args__ = {"version_id_col": Version}

    equipment   = relationship("Equipment", back_populates="requests")
    team        = relationship("MaintenanceTeam", back_populates="requests")
    assigned_to = relationship("AppUser", foreign_keys=[AssignedToID])
    created_by  = relationship("AppUser", foreign_keys=[CreatedByID])
