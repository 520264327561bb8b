# backend/maintrack/routers/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.api import list_meta, ok
from ..core.db import get_db
from ..core.security import require_roles
from ..domain.constants import ROLE_ADMIN
from ..schemas.user import RoleUpdate, UserRead, UserWithTeams
from ..services import user_service

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(require_roles(ROLE_ADMIN))],
)

@router.get("")
def list_users_ep(db: Session = Depends(get_db)):
    items = [UserWithTeams.model_validate(u) for u in user_service.list_users(db)]
    return ok(items, meta=list_meta(items))

@router.patch("/{user_id}/role")
def change_role_ep(user_id: int, body: RoleUpdate, db: Session = Depends(get_db)):
    user = user_service.change_role(db, user_id=user_id, role=body.Role)
    return ok(UserRead.model_validate(user), message="User role updated")

@router.patch("/{user_id}/toggle-status")
def toggle_status_ep(user_id: int, db: Session = Depends(get_db)):
    user = user_service.toggle_active(db, user_id=user_id)
    msg = "User activated" if user.IsActive else "User deactivated"
    return ok(UserRead.model_validate(user), message=msg)
