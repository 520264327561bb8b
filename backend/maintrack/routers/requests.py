# backend/maintrack/routers/requests.py
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..core.api import list_meta, ok, page_meta
from ..core.security import get_current_actor
from ..domain.ports import RequestFilters
from ..domain.roles import Actor
from ..schemas.maintenance import (
    AssignIn,
    KindLiteral,
    RequestCreate,
    RequestOut,
    RequestUpdate,
    StatusLiteral,
    StatusUpdate,
)
from ..services.lifecycle import RequestLifecycleEngine
from .deps import get_lifecycle_engine

router = APIRouter(prefix="/requests", tags=["requests"])


def _out(req) -> RequestOut:
    return RequestOut.model_validate(req)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_request_ep(
    body: RequestCreate,
    actor: Actor = Depends(get_current_actor),
    engine: RequestLifecycleEngine = Depends(get_lifecycle_engine),
):
    req = engine.create_request(
        subject=body.Subject,
        kind=body.RequestType,
        equipment_id=body.EquipmentID,
        creator=actor,
        description=body.Description_s,
        scheduled_date=body.ScheduledDate,
        team_id=body.TeamID,
        assigned_to_id=body.AssignedToID,
    )
    return ok(_out(req), status_code=status.HTTP_201_CREATED, message="Maintenance request created")


@router.get("")
def list_requests_ep(
    status_s: Optional[StatusLiteral] = Query(None, alias="status"),
    requestType: Optional[KindLiteral] = Query(None),
    equipmentId: Optional[int] = Query(None),
    teamId: Optional[int] = Query(None),
    assignedToId: Optional[int] = Query(None),
    createdById: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    engine: RequestLifecycleEngine = Depends(get_lifecycle_engine),
):
    filters = RequestFilters(
        status=status_s,
        request_type=requestType,
        equipment_id=equipmentId,
        team_id=teamId,
        assigned_to_id=assignedToId,
        created_by_id=createdById,
        search=search,
    )
    rows, total = engine.list_requests(filters, actor, page=page, limit=limit)
    return ok([_out(r) for r in rows], meta=page_meta(page, limit, total))


# ---- Sabit yollar /{request_id}'den önce gelmeli ----
@router.get("/calendar")
def calendar_ep(
    startDate: datetime = Query(...),
    endDate: datetime = Query(...),
    actor: Actor = Depends(get_current_actor),
    engine: RequestLifecycleEngine = Depends(get_lifecycle_engine),
):
    items = [_out(r) for r in engine.calendar(startDate, endDate, actor)]
    return ok(items, meta=list_meta(items, {"startDate": startDate, "endDate": endDate}))


@router.get("/overdue")
def overdue_ep(
    actor: Actor = Depends(get_current_actor),
    engine: RequestLifecycleEngine = Depends(get_lifecycle_engine),
):
    items = [_out(r) for r in engine.overdue(actor)]
    return ok(items, meta=list_meta(items))


@router.get("/{request_id}")
def get_request_ep(
    request_id: int,
    actor: Actor = Depends(get_current_actor),
    engine: RequestLifecycleEngine = Depends(get_lifecycle_engine),
):
    return ok(_out(engine.get_request(request_id, actor)))


@router.put("/{request_id}")
def update_request_ep(
    request_id: int,
    body: RequestUpdate,
    actor: Actor = Depends(get_current_actor),
    engine: RequestLifecycleEngine = Depends(get_lifecycle_engine),
):
    req = engine.update_request_fields(request_id, body.to_patch(), actor)
    return ok(_out(req), message="Maintenance request updated")


@router.patch("/{request_id}/status")
def update_status_ep(
    request_id: int,
    body: StatusUpdate,
    actor: Actor = Depends(get_current_actor),
    engine: RequestLifecycleEngine = Depends(get_lifecycle_engine),
):
    req = engine.transition_status(request_id, body.Status_s, actor, duration_hours=body.DurationHours)
    return ok(_out(req), message=f"Request status updated to {req.Status_s}")


@router.patch("/{request_id}/assign")
def assign_ep(
    request_id: int,
    body: AssignIn,
    actor: Actor = Depends(get_current_actor),
    engine: RequestLifecycleEngine = Depends(get_lifecycle_engine),
):
    req = engine.assign_technician(request_id, body.TechnicianID, actor)
    return ok(_out(req), message="Technician assigned")
