# backend/maintrack/services/equipment_service.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import ConflictError, NotFoundError, ValidationError
from ..domain.constants import (
    KIND_CORRECTIVE,
    KIND_PREVENTIVE,
    OPEN_STATUSES,
    STATUS_REPAIRED,
)
from ..domain.ports import VisibilityScope
from ..models import AppUser, Equipment, MaintenanceRequest, MaintenanceTeam
from .repositories import apply_scope

logger = logging.getLogger(__name__)


def _check_refs(db: Session, data: Dict[str, Any]) -> None:
    if data.get("DefaultTeamID") is not None and not db.get(MaintenanceTeam, data["DefaultTeamID"]):
        raise NotFoundError("Maintenance team")
    if data.get("AssignedEmployeeID") is not None and not db.get(AppUser, data["AssignedEmployeeID"]):
        raise NotFoundError("Employee")


def _check_dates(purchase, warranty) -> None:
    if purchase and warranty and warranty < purchase:
        raise ValidationError("Warranty expiry date cannot be before purchase date")


def _commit(db: Session, eq: Equipment) -> Equipment:
    try:
        db.add(eq)
        db.commit()
        db.refresh(eq)
        return eq
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(f"db_error: {getattr(e, 'orig', e)}")
    except Exception:
        db.rollback()
        logger.exception("equipment save error (EquipmentID=%s)", eq.EquipmentID)
        raise


def get_equipment(db: Session, equipment_id: int) -> Equipment:
    eq = db.get(Equipment, equipment_id)
    if not eq:
        raise NotFoundError("Equipment")
    return eq


def list_equipment(
    db: Session,
    *,
    category: Optional[str] = None,
    department: Optional[str] = None,
    assigned_employee_id: Optional[int] = None,
    is_scrap: Optional[bool] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 20,
) -> Tuple[List[Equipment], int]:
    q = db.query(Equipment)
    if category:
        q = q.filter(Equipment.Category == category)
    if department:
        q = q.filter(Equipment.Department == department)
    if assigned_employee_id is not None:
        q = q.filter(Equipment.AssignedEmployeeID == assigned_employee_id)
    if is_scrap is not None:
        q = q.filter(Equipment.IsScrap == is_scrap)
    if search:
        like = f"%{search.lower()}%"
        q = q.filter(or_(
            func.lower(Equipment.Name).like(like),
            func.lower(Equipment.SerialNumber).like(like),
            func.lower(Equipment.Location).like(like),
        ))

    total = q.count()
    rows = (
        q.order_by(Equipment.CreatedAt.desc(), Equipment.EquipmentID.desc())
        .offset(max(0, skip))
        .limit(min(max(1, limit), 100))
        .all()
    )
    return rows, total


def create_equipment(db: Session, data: Dict[str, Any]) -> Equipment:
    if db.query(Equipment).filter(Equipment.SerialNumber == data["SerialNumber"]).first():
        raise ConflictError("Equipment with this serial number already exists")
    _check_dates(data.get("PurchaseDate"), data.get("WarrantyExpiry"))
    _check_refs(db, data)

    eq = Equipment(**data, IsScrap=False)
    eq = _commit(db, eq)
    logger.info("equipment created (EquipmentID=%s, serial=%s)", eq.EquipmentID, eq.SerialNumber)
    return eq


def update_equipment(db: Session, equipment_id: int, data: Dict[str, Any]) -> Equipment:
    eq = get_equipment(db, equipment_id)

    serial = data.get("SerialNumber")
    if serial and serial != eq.SerialNumber:
        if db.query(Equipment).filter(Equipment.SerialNumber == serial).first():
            raise ConflictError("Equipment with this serial number already exists")

    _check_dates(
        data.get("PurchaseDate", eq.PurchaseDate),
        data.get("WarrantyExpiry", eq.WarrantyExpiry),
    )
    _check_refs(db, data)

    for k, v in data.items():
        setattr(eq, k, v)
    return _commit(db, eq)


def delete_equipment(db: Session, equipment_id: int) -> None:
    eq = get_equipment(db, equipment_id)

    active = (
        db.query(MaintenanceRequest)
        .filter(
            MaintenanceRequest.EquipmentID == equipment_id,
            MaintenanceRequest.Status_s.in_(sorted(OPEN_STATUSES)),
        )
        .count()
    )
    if active > 0:
        raise ValidationError(
            f"Cannot delete equipment with {active} active maintenance request(s). Mark as scrap instead."
        )
    has_history = (
        db.query(MaintenanceRequest)
        .filter(MaintenanceRequest.EquipmentID == equipment_id)
        .first()
    )
    if has_history:
        raise ValidationError("Cannot delete equipment with maintenance history. Mark as scrap instead.")

    try:
        db.delete(eq)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("delete_equipment error (EquipmentID=%s)", equipment_id)
        raise
    logger.info("equipment deleted (EquipmentID=%s)", equipment_id)


def mark_scrap(db: Session, equipment_id: int) -> Equipment:
    """İdempotent: zaten hurdaysa olduğu gibi döner."""
    eq = get_equipment(db, equipment_id)
    if eq.IsScrap:
        return eq
    eq.IsScrap = True
    eq = _commit(db, eq)
    logger.info("equipment marked as scrap (EquipmentID=%s)", equipment_id)
    return eq


def maintenance_history(db: Session, equipment_id: int, scope: VisibilityScope) -> Dict[str, Any]:
    """Talepler ve istatistikler aktörün görebildiği satırlarla sınırlıdır."""
    eq = get_equipment(db, equipment_id)
    requests = (
        apply_scope(db.query(MaintenanceRequest), scope)
        .filter(MaintenanceRequest.EquipmentID == equipment_id)
        .order_by(MaintenanceRequest.CreatedAt.desc(), MaintenanceRequest.RequestID.desc())
        .all()
    )
    stats = {
        "total": len(requests),
        "corrective": sum(1 for r in requests if r.RequestType == KIND_CORRECTIVE),
        "preventive": sum(1 for r in requests if r.RequestType == KIND_PREVENTIVE),
        "repaired": sum(1 for r in requests if r.Status_s == STATUS_REPAIRED),
        "active": sum(1 for r in requests if r.Status_s in OPEN_STATUSES),
    }
    return {"equipment": eq, "requests": requests, "stats": stats}
