# backend/maintrack/routers/deps.py
from fastapi import Depends
from sqlalchemy.orm import Session

from ..core.db import get_db
from ..services.lifecycle import RequestLifecycleEngine
from ..services.repositories import (
    SqlEquipmentRegistry,
    SqlIdentityDirectory,
    SqlRequestStore,
    SqlTeamRegistry,
)


# Motor istek başına kurulur; tüm port'lar aynı Session'ı paylaşır
def get_lifecycle_engine(db: Session = Depends(get_db)) -> RequestLifecycleEngine:
    return RequestLifecycleEngine(
        equipment=SqlEquipmentRegistry(db),
        teams=SqlTeamRegistry(db),
        identities=SqlIdentityDirectory(db),
        requests=SqlRequestStore(db),
    )
