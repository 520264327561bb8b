from sqlalchemy import Column, Integer, String, Date, Boolean, DateTime, ForeignKey, text
from sqlalchemy.orm import relationship
from ..core.db import Base
from ..core.clock import utcnow

class Equipment(Base):
    __tablename__ = "Equipment"

    EquipmentID        = Column(Integer, primary_key=True, autoincrement=True)
    Name               = Column(String(200), nullable=False)
    SerialNumber       = Column(String(100), nullable=False, unique=True)
    Category           = Column(String(50),  nullable=False)
    Department         = Column(String(50),  nullable=False)
    Location           = Column(String(200), nullable=False)
    AssignedEmployeeID = Column(Integer, ForeignKey("AppUser.UserID"))
    DefaultTeamID      = Column(Integer, ForeignKey("MaintenanceTeam.TeamID"))
    PurchaseDate       = Column(Date)
    WarrantyExpiry     = Column(Date)
    # tek yönlü: True olduktan sonra geri alınmaz
    IsScrap            = Column(Boolean,  nullable=False, server_default=text("0"), default=False)
    CreatedAt          = Column(DateTime, nullable=False, default=utcnow)
    UpdatedAt          = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    assigned_employee = relationship("AppUser")
    default_team      = relationship("MaintenanceTeam", back_populates="default_for_equipment")

    # 1 ekipman -> N talep
    requests = relationship("MaintenanceRequest", back_populates="equipment")
