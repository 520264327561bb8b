# backend/maintrack/services/repositories.py
"""
Talep motorunun port'larının SQLAlchemy implementasyonları.

Hepsi aynı Session'ı paylaşır: mark_scrap yalnızca işaretler, commit
SqlRequestStore.save/add içinde tek transaction olarak yapılır.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Set, Tuple

from sqlalchemy import func, or_, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..core.errors import ConflictError
from ..domain.constants import OPEN_STATUSES
from ..domain.ports import RequestFilters, VisibilityScope
from ..models import AppUser, Equipment, MaintenanceRequest, MaintenanceTeam, team_member

logger = logging.getLogger(__name__)


def _dialect(db: Session) -> str:
    try:
        return db.bind.dialect.name
    except Exception:
        return "unknown"


class SqlEquipmentRegistry:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, equipment_id: int) -> Optional[Equipment]:
        return self.db.get(Equipment, equipment_id)

    def mark_scrap(self, equipment_id: int) -> None:
        eq = self.db.get(Equipment, equipment_id)
        if eq is not None and not eq.IsScrap:
            eq.IsScrap = True
            self.db.add(eq)


class SqlTeamRegistry:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, team_id: int) -> Optional[MaintenanceTeam]:
        return self.db.get(MaintenanceTeam, team_id)

    def is_member(self, team_id: int, identity_id: int) -> bool:
        row = self.db.execute(
            team_member.select().where(
                team_member.c.TeamID == team_id,
                team_member.c.UserID == identity_id,
            )
        ).first()
        return row is not None

    def teams_for_member(self, identity_id: int) -> Set[int]:
        rows = self.db.execute(
            team_member.select().where(team_member.c.UserID == identity_id)
        ).all()
        return {r.TeamID for r in rows}


class SqlIdentityDirectory:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, identity_id: int) -> Optional[AppUser]:
        return self.db.get(AppUser, identity_id)


def apply_scope(q, scope: VisibilityScope):
    if scope.unrestricted:
        return q
    if scope.member_id is not None:
        conds = [MaintenanceRequest.AssignedToID == scope.member_id]
        if scope.team_ids:
            conds.append(MaintenanceRequest.TeamID.in_(sorted(scope.team_ids)))
        return q.filter(or_(*conds))
    return q.filter(MaintenanceRequest.CreatedByID == scope.created_by_id)


def apply_filters(q, f: RequestFilters):
    if f.status:
        q = q.filter(MaintenanceRequest.Status_s == f.status)
    if f.request_type:
        q = q.filter(MaintenanceRequest.RequestType == f.request_type)
    if f.equipment_id is not None:
        q = q.filter(MaintenanceRequest.EquipmentID == f.equipment_id)
    if f.team_id is not None:
        q = q.filter(MaintenanceRequest.TeamID == f.team_id)
    if f.assigned_to_id is not None:
        q = q.filter(MaintenanceRequest.AssignedToID == f.assigned_to_id)
    if f.created_by_id is not None:
        q = q.filter(MaintenanceRequest.CreatedByID == f.created_by_id)
    if f.search:
        like = f"%{f.search.lower()}%"
        q = q.filter(or_(
            func.lower(MaintenanceRequest.Subject).like(like),
            func.lower(MaintenanceRequest.Description_s).like(like),
        ))
    if f.scheduled_from:
        q = q.filter(MaintenanceRequest.ScheduledDate >= f.scheduled_from)
    if f.scheduled_to:
        q = q.filter(MaintenanceRequest.ScheduledDate <= f.scheduled_to)
    if f.scheduled_before:
        q = q.filter(MaintenanceRequest.ScheduledDate < f.scheduled_before)
    if f.open_only:
        q = q.filter(MaintenanceRequest.Status_s.in_(sorted(OPEN_STATUSES)))
    return q


ORDER_FIELDS = {
    "RequestID": MaintenanceRequest.RequestID,
    "CreatedAt": MaintenanceRequest.CreatedAt,
    "ScheduledDate": MaintenanceRequest.ScheduledDate,
}


class SqlRequestStore:
    def __init__(self, db: Session):
        self.db = db

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[MaintenanceRequest]:
        if not for_update:
            return self.db.get(MaintenanceRequest, request_id)
        return self._lock_for_update(request_id)

    def _lock_for_update(self, request_id: int) -> Optional[MaintenanceRequest]:
        """
        Talep satırını güncelleme için kilitle ve taze oku.
        MSSQL'de UPDLOCK+ROWLOCK kullanılır; diğerlerinde SELECT ... FOR UPDATE
        (SQLite bunu yok sayar; Version sütunu yine de korur).
        """
        if _dialect(self.db) == "mssql":
            self.db.execute(
                text("SELECT RequestID FROM MaintenanceRequest WITH (UPDLOCK, ROWLOCK) WHERE RequestID=:rid"),
                {"rid": request_id},
            )
            req = self.db.get(MaintenanceRequest, request_id)
            if req:
                self.db.refresh(req)
            return req
        return (
            self.db.query(MaintenanceRequest)
            .filter(MaintenanceRequest.RequestID == request_id)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )

    def add(self, request: MaintenanceRequest) -> MaintenanceRequest:
        self.db.add(request)
        return self._commit(request)

    def save(self, request: MaintenanceRequest) -> MaintenanceRequest:
        self.db.add(request)
        return self._commit(request)

    def _commit(self, request: MaintenanceRequest) -> MaintenanceRequest:
        try:
            self.db.flush()
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            logger.warning("concurrent update detected (RequestID=%s)", request.RequestID)
            raise ConflictError("Request was modified concurrently; reload and retry")
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(f"db_error: {getattr(e, 'orig', e)}")
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(request)
        return request

    def find(
        self,
        filters: RequestFilters,
        scope: VisibilityScope,
        *,
        order_by: str = "-CreatedAt",
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[MaintenanceRequest], int]:
        q = apply_filters(apply_scope(self.db.query(MaintenanceRequest), scope), filters)
        total = q.order_by(None).count()

        desc = order_by.startswith("-")
        key = order_by[1:] if desc else order_by
        col = ORDER_FIELDS.get(key, MaintenanceRequest.CreatedAt)
        q = q.order_by(col.desc() if desc else col.asc(), MaintenanceRequest.RequestID.desc() if desc else MaintenanceRequest.RequestID.asc())

        if skip:
            q = q.offset(max(0, skip))
        if limit is not None:
            q = q.limit(max(1, limit))
        return q.all(), total
