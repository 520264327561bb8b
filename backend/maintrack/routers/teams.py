# backend/maintrack/routers/teams.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..core.api import list_meta, ok
from ..core.db import get_db
from ..core.security import get_current_actor, get_current_user, require_roles
from ..domain.constants import ROLE_ADMIN, ROLE_MANAGER
from ..domain.roles import Actor
from ..schemas.common import EquipmentBrief
from ..schemas.team import MemberAdd, OpenRequestBrief, TeamCreate, TeamDetail, TeamRead, TeamUpdate
from ..services import team_service
from ..services.lifecycle import RequestLifecycleEngine
from .deps import get_lifecycle_engine

router = APIRouter(
    prefix="/teams",
    tags=["teams"],
    dependencies=[Depends(get_current_user)],
)

Supervisor = require_roles(ROLE_MANAGER, ROLE_ADMIN)
AdminOnly = require_roles(ROLE_ADMIN)

@router.get("")
def list_teams_ep(
    isActive: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    items = [TeamRead.model_validate(t) for t in team_service.list_teams(db, is_active=isActive, search=search)]
    return ok(items, meta=list_meta(items))

@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(Supervisor)])
def create_team_ep(body: TeamCreate, db: Session = Depends(get_db)):
    team = team_service.create_team(
        db, name=body.Name, description=body.Description_s, member_ids=body.MemberIDs
    )
    return ok(TeamRead.model_validate(team), status_code=status.HTTP_201_CREATED, message="Team created")

@router.get("/{team_id}")
def get_team_ep(
    team_id: int,
    actor: Actor = Depends(get_current_actor),
    engine: RequestLifecycleEngine = Depends(get_lifecycle_engine),
    db: Session = Depends(get_db),
):
    d = team_service.team_detail(db, team_id, engine.scope_for(actor))
    detail = TeamDetail(
        **TeamRead.model_validate(d["team"]).model_dump(),
        open_requests=[OpenRequestBrief.model_validate(r) for r in d["open_requests"]],
        default_for_equipment=[EquipmentBrief.model_validate(e) for e in d["default_for_equipment"]],
    )
    return ok(detail)

@router.put("/{team_id}", dependencies=[Depends(Supervisor)])
def update_team_ep(team_id: int, body: TeamUpdate, db: Session = Depends(get_db)):
    team = team_service.update_team(db, team_id, body.model_dump(exclude_unset=True))
    return ok(TeamRead.model_validate(team), message="Team updated")

@router.delete("/{team_id}", dependencies=[Depends(AdminOnly)])
def delete_team_ep(team_id: int, db: Session = Depends(get_db)):
    team_service.delete_team(db, team_id)
    return ok({"TeamID": team_id}, message="Team deleted")

@router.post("/{team_id}/members", dependencies=[Depends(Supervisor)])
def add_member_ep(team_id: int, body: MemberAdd, db: Session = Depends(get_db)):
    team = team_service.add_member(db, team_id, body.UserID)
    return ok(TeamRead.model_validate(team), message="Member added")

@router.delete("/{team_id}/members/{user_id}", dependencies=[Depends(Supervisor)])
def remove_member_ep(team_id: int, user_id: int, db: Session = Depends(get_db)):
    team = team_service.remove_member(db, team_id, user_id)
    return ok(TeamRead.model_validate(team), message="Member removed")
