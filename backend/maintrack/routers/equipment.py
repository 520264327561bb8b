# backend/maintrack/routers/equipment.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..core.api import ok, page_meta
from ..core.db import get_db
from ..core.security import get_current_actor, get_current_user, require_roles
from ..domain.constants import ROLE_ADMIN, ROLE_MANAGER
from ..domain.roles import Actor
from ..schemas.equipment import EquipmentCreate, EquipmentRead, EquipmentUpdate
from ..schemas.maintenance import RequestOut
from ..services import equipment_service
from ..services.lifecycle import RequestLifecycleEngine
from .deps import get_lifecycle_engine

router = APIRouter(
    prefix="/equipment",
    tags=["equipment"],
    dependencies=[Depends(get_current_user)],
)

Supervisor = require_roles(ROLE_MANAGER, ROLE_ADMIN)

@router.get("")
def list_equipment_ep(
    category: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    assignedEmployeeId: Optional[int] = Query(None),
    isScrap: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    rows, total = equipment_service.list_equipment(
        db,
        category=category,
        department=department,
        assigned_employee_id=assignedEmployeeId,
        is_scrap=isScrap,
        search=search,
        skip=(page - 1) * limit,
        limit=limit,
    )
    items = [EquipmentRead.model_validate(e) for e in rows]
    return ok(items, meta=page_meta(page, limit, total))

@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(Supervisor)])
def create_equipment_ep(body: EquipmentCreate, db: Session = Depends(get_db)):
    eq = equipment_service.create_equipment(db, body.model_dump())
    return ok(EquipmentRead.model_validate(eq), status_code=status.HTTP_201_CREATED, message="Equipment created")

@router.get("/{equipment_id}")
def get_equipment_ep(equipment_id: int, db: Session = Depends(get_db)):
    return ok(EquipmentRead.model_validate(equipment_service.get_equipment(db, equipment_id)))

@router.put("/{equipment_id}", dependencies=[Depends(Supervisor)])
def update_equipment_ep(equipment_id: int, body: EquipmentUpdate, db: Session = Depends(get_db)):
    eq = equipment_service.update_equipment(db, equipment_id, body.model_dump(exclude_unset=True))
    return ok(EquipmentRead.model_validate(eq), message="Equipment updated")

@router.delete("/{equipment_id}", dependencies=[Depends(Supervisor)])
def delete_equipment_ep(equipment_id: int, db: Session = Depends(get_db)):
    equipment_service.delete_equipment(db, equipment_id)
    return ok({"EquipmentID": equipment_id}, message="Equipment deleted")

@router.patch("/{equipment_id}/scrap", dependencies=[Depends(Supervisor)])
def scrap_equipment_ep(equipment_id: int, db: Session = Depends(get_db)):
    eq = equipment_service.mark_scrap(db, equipment_id)
    return ok(EquipmentRead.model_validate(eq), message="Equipment marked as scrap")

@router.get("/{equipment_id}/history")
def equipment_history_ep(
    equipment_id: int,
    actor: Actor = Depends(get_current_actor),
    engine: RequestLifecycleEngine = Depends(get_lifecycle_engine),
    db: Session = Depends(get_db),
):
    h = equipment_service.maintenance_history(db, equipment_id, engine.scope_for(actor))
    return ok({
        "equipment": EquipmentRead.model_validate(h["equipment"]),
        "requests": [RequestOut.model_validate(r) for r in h["requests"]],
        "stats": h["stats"],
    })
