from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, CheckConstraint, text
)
from sqlalchemy.orm import relationship
from ..core.db import Base
from ..core.clock import utcnow
from ..domain.constants import ALLOWED_ROLES
from .team import team_member

class AppUser(Base):
    __tablename__ = "AppUser"

    UserID         = Column(Integer, primary_key=True, autoincrement=True)
    Email          = Column(String(200), nullable=False, unique=True)
    FullName       = Column(String(100), nullable=False)
    HashedPassword = Column(String(255), nullable=False)
    Role           = Column(String(20),  nullable=False, server_default=text("'requester'"))
    IsActive       = Column(Boolean,     nullable=False, server_default=text("1"), default=True)
    CreatedAt      = Column(DateTime,    nullable=False, default=utcnow)
    UpdatedAt      = Column(DateTime,    nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(
            "Role in (" + ",".join(f"'{r}'" for r in ALLOWED_ROLES) + ")",
            name="CK_AppUser_Role"
        ),
    )

    # N-N takım üyeliği
    teams = relationship("MaintenanceTeam", secondary=team_member, back_populates="members")
