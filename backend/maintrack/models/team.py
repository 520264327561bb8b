from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Table, text
from sqlalchemy.orm import relationship
from ..core.db import Base
from ..core.clock import utcnow

# Üyelik tablosu (takım <-> kullanıcı)
team_member = Table(
    "TeamMember",
    Base.metadata,
    Column("TeamID", Integer, ForeignKey("MaintenanceTeam.TeamID", ondelete="CASCADE"), primary_key=True),
    Column("UserID", Integer, ForeignKey("AppUser.UserID", ondelete="CASCADE"), primary_key=True),
)

class MaintenanceTeam(Base):
    __tablename__ = "MaintenanceTeam"

    TeamID        = Column(Integer, primary_key=True, autoincrement=True)
    Name          = Column(String(100), nullable=False, unique=True)
    Description_s = Column(String(1000))
    IsActive      = Column(Boolean,  nullable=False, server_default=text("1"), default=True)
    CreatedAt     = Column(DateTime, nullable=False, default=utcnow)
    UpdatedAt     = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    members  = relationship("AppUser", secondary=team_member, back_populates="teams")
    requests = relationship("MaintenanceRequest", back_populates="team")
    default_for_equipment = relationship("Equipment", back_populates="default_team")
