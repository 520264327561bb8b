# backend/maintrack/services/team_service.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import ConflictError, NotFoundError, ValidationError
from ..domain.constants import OPEN_STATUSES, TECHNICAL_ROLES
from ..domain.roles import has_role
from ..domain.ports import VisibilityScope
from ..models import AppUser, Equipment, MaintenanceRequest, MaintenanceTeam
from .repositories import apply_scope

logger = logging.getLogger(__name__)

NON_TECHNICAL_MEMBER_MSG = "Only users with technician, manager, or admin roles can be team members"


def _commit(db: Session, team: MaintenanceTeam) -> MaintenanceTeam:
    try:
        db.add(team)
        db.commit()
        db.refresh(team)
        return team
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(f"db_error: {getattr(e, 'orig', e)}")
    except Exception:
        db.rollback()
        logger.exception("team save error (TeamID=%s)", team.TeamID)
        raise


def _resolve_members(db: Session, member_ids: List[int]) -> List[AppUser]:
    ids = list(dict.fromkeys(member_ids))
    if not ids:
        return []
    members = db.query(AppUser).filter(AppUser.UserID.in_(ids)).all()
    found = {m.UserID for m in members}
    missing = [i for i in ids if i not in found]
    if missing:
        raise NotFoundError(f"User(s) {', '.join(str(i) for i in missing)}")
    if any(not has_role(m, TECHNICAL_ROLES) for m in members):
        raise ValidationError(NON_TECHNICAL_MEMBER_MSG)
    return members


def _ensure_unique_name(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    q = db.query(MaintenanceTeam).filter(MaintenanceTeam.Name == name)
    if exclude_id is not None:
        q = q.filter(MaintenanceTeam.TeamID != exclude_id)
    if q.first():
        raise ConflictError("Team with this name already exists")


def _open_request_count(db: Session, team_id: int) -> int:
    return (
        db.query(MaintenanceRequest)
        .filter(
            MaintenanceRequest.TeamID == team_id,
            MaintenanceRequest.Status_s.in_(sorted(OPEN_STATUSES)),
        )
        .count()
    )


def get_team(db: Session, team_id: int) -> MaintenanceTeam:
    team = db.get(MaintenanceTeam, team_id)
    if not team:
        raise NotFoundError("Team")
    return team


def team_detail(db: Session, team_id: int, scope: VisibilityScope) -> Dict[str, Any]:
    team = get_team(db, team_id)
    open_requests = (
        apply_scope(db.query(MaintenanceRequest), scope)
        .filter(
            MaintenanceRequest.TeamID == team_id,
            MaintenanceRequest.Status_s.in_(sorted(OPEN_STATUSES)),
        )
        .order_by(MaintenanceRequest.CreatedAt.desc(), MaintenanceRequest.RequestID.desc())
        .limit(20)
        .all()
    )
    equipment = (
        db.query(Equipment)
        .filter(Equipment.DefaultTeamID == team_id)
        .order_by(Equipment.EquipmentID)
        .limit(10)
        .all()
    )
    return {"team": team, "open_requests": open_requests, "default_for_equipment": equipment}


def list_teams(db: Session, *, is_active: Optional[bool] = None, search: Optional[str] = None) -> List[MaintenanceTeam]:
    q = db.query(MaintenanceTeam)
    if is_active is not None:
        q = q.filter(MaintenanceTeam.IsActive == is_active)
    if search:
        like = f"%{search.lower()}%"
        q = q.filter(or_(
            func.lower(MaintenanceTeam.Name).like(like),
            func.lower(MaintenanceTeam.Description_s).like(like),
        ))
    return q.order_by(MaintenanceTeam.Name.asc()).all()


def create_team(db: Session, *, name: str, description: Optional[str] = None, member_ids: Optional[List[int]] = None) -> MaintenanceTeam:
    name = name.strip()
    _ensure_unique_name(db, name)
    members = _resolve_members(db, member_ids or [])

    team = MaintenanceTeam(Name=name, Description_s=description, IsActive=True)
    team.members = members
    team = _commit(db, team)
    logger.info("team created (TeamID=%s, members=%s)", team.TeamID, len(members))
    return team


def update_team(db: Session, team_id: int, data: Dict[str, Any]) -> MaintenanceTeam:
    team = get_team(db, team_id)

    if data.get("Name") and data["Name"].strip() != team.Name:
        _ensure_unique_name(db, data["Name"].strip(), exclude_id=team_id)
        team.Name = data["Name"].strip()
    if "Description_s" in data:
        team.Description_s = data["Description_s"]
    if data.get("IsActive") is not None:
        team.IsActive = data["IsActive"]

    if data.get("MemberIDs") is not None:
        new_members = _resolve_members(db, data["MemberIDs"])
        new_ids = {m.UserID for m in new_members}
        # çıkarılan üyelerin açık atamaları boşa düşer
        for removed in [m for m in team.members if m.UserID not in new_ids]:
            _unassign_open_requests(db, team_id, removed.UserID)
        team.members = new_members

    return _commit(db, team)


def delete_team(db: Session, team_id: int) -> None:
    team = get_team(db, team_id)

    active = _open_request_count(db, team_id)
    if active > 0:
        raise ValidationError(f"Cannot delete team with {active} active maintenance request(s)")
    if db.query(MaintenanceRequest).filter(MaintenanceRequest.TeamID == team_id).first():
        raise ValidationError("Cannot delete team with maintenance history. Deactivate it instead.")

    try:
        # varsayılan takım referanslarını temizle
        db.query(Equipment).filter(Equipment.DefaultTeamID == team_id).update(
            {Equipment.DefaultTeamID: None}, synchronize_session=False
        )
        team.members = []
        db.delete(team)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("delete_team error (TeamID=%s)", team_id)
        raise
    logger.info("team deleted (TeamID=%s)", team_id)


def add_member(db: Session, team_id: int, user_id: int) -> MaintenanceTeam:
    team = get_team(db, team_id)
    user = db.get(AppUser, user_id)
    if not user:
        raise NotFoundError("User")
    if not has_role(user, TECHNICAL_ROLES):
        raise ValidationError(NON_TECHNICAL_MEMBER_MSG)

    # idempotent
    if any(m.UserID == user_id for m in team.members):
        return team
    team.members.append(user)
    team = _commit(db, team)
    logger.info("team member added (TeamID=%s, UserID=%s)", team_id, user_id)
    return team


def _unassign_open_requests(db: Session, team_id: int, user_id: int) -> int:
    return (
        db.query(MaintenanceRequest)
        .filter(
            MaintenanceRequest.TeamID == team_id,
            MaintenanceRequest.AssignedToID == user_id,
            MaintenanceRequest.Status_s.in_(sorted(OPEN_STATUSES)),
        )
        .update(
            {
                MaintenanceRequest.AssignedToID: None,
                MaintenanceRequest.Version: MaintenanceRequest.Version + 1,
            },
            synchronize_session=False,
        )
    )


def detach_from_all_teams(db: Session, user: AppUser) -> int:
    """
    Kullanıcıyı tüm takımlardan çıkarır ve açık atamalarını boşa düşürür.
    Commit etmez; çağıran tek transaction içinde kaydeder.
    """
    unassigned = 0
    for team in list(user.teams):
        unassigned += _unassign_open_requests(db, team.TeamID, user.UserID)
    user.teams = []
    return unassigned


def remove_member(db: Session, team_id: int, user_id: int) -> MaintenanceTeam:
    """
    Üyeyi takımdan çıkarır; üyenin bu takımdaki açık (New/InProgress)
    talepleri silinmez, sadece atamasız kalır. İdempotent.
    """
    team = get_team(db, team_id)
    try:
        unassigned = _unassign_open_requests(db, team_id, user_id)
        team.members = [m for m in team.members if m.UserID != user_id]
        db.add(team)
        db.commit()
        db.refresh(team)
    except Exception:
        db.rollback()
        logger.exception("remove_member error (TeamID=%s, UserID=%s)", team_id, user_id)
        raise
    logger.info("team member removed (TeamID=%s, UserID=%s, unassigned=%s)", team_id, user_id, unassigned)
    return team
