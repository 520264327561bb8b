# backend/maintrack/services/user_service.py
from __future__ import annotations
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..core.security import hash_password, verify_password
from ..domain.constants import ROLE_ADMIN, ROLE_REQUESTER, SELF_REGISTER_ROLES, TECHNICAL_ROLES
from ..domain.roles import is_valid_role
from ..models import AppUser
from . import team_service

logger = logging.getLogger(__name__)


def _active_admin_count(db: Session) -> int:
    return (
        db.query(AppUser)
        .filter(AppUser.Role == ROLE_ADMIN, AppUser.IsActive == True)  # noqa: E712
        .count()
    )


def _commit(db: Session, user: AppUser) -> AppUser:
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    except Exception:
        db.rollback()
        logger.exception("user save error (UserID=%s)", user.UserID)
        raise


def register_user(
    db: Session, *, email: str, full_name: str, password: str, role: Optional[str] = None
) -> AppUser:
    email = email.strip().lower()
    role = (role or ROLE_REQUESTER).strip().lower()
    if not is_valid_role(role):
        raise ValidationError(f"Invalid role: '{role}'")
    if role not in SELF_REGISTER_ROLES:
        raise ValidationError("Only requester or technician roles can be chosen at registration")

    if db.query(AppUser).filter(AppUser.Email == email).first():
        raise ConflictError("User with this email already exists")

    user = AppUser(
        Email=email,
        FullName=full_name.strip(),
        Role=role,
        IsActive=True,
        HashedPassword=hash_password(password),
    )
    user = _commit(db, user)
    logger.info("user registered (UserID=%s, role=%s)", user.UserID, role)
    return user


def authenticate(db: Session, *, email: str, password: str) -> Optional[AppUser]:
    user = db.query(AppUser).filter(AppUser.Email == email.strip().lower()).first()
    if not user or not user.HashedPassword or not verify_password(password, user.HashedPassword):
        return None
    if not user.IsActive:
        return None
    return user


def list_users(db: Session) -> List[AppUser]:
    return db.query(AppUser).order_by(AppUser.CreatedAt.desc(), AppUser.UserID.desc()).all()


def change_role(db: Session, *, user_id: int, role: str) -> AppUser:
    """
    Son aktif admin'in rolü düşürülemez. Teknik olmayan role düşen kullanıcı
    tüm takımlardan çıkar, açık atamaları boşa düşer.
    """
    if not is_valid_role(role):
        raise ValidationError(f"Invalid role: '{role}'")

    user = db.get(AppUser, user_id)
    if not user:
        raise NotFoundError("User")

    if user.Role == ROLE_ADMIN and role != ROLE_ADMIN and user.IsActive:
        if _active_admin_count(db) <= 1:
            raise ForbiddenError("Cannot change the role of the last active admin")

    unassigned = 0
    if role not in TECHNICAL_ROLES:
        unassigned = team_service.detach_from_all_teams(db, user)

    user.Role = role
    user = _commit(db, user)
    logger.info("user role changed (UserID=%s, role=%s, unassigned=%s)", user_id, role, unassigned)
    return user


def toggle_active(db: Session, *, user_id: int) -> AppUser:
    """Son aktif admin pasifleştirilemez (soft-deactivate, silme yok)."""
    user = db.get(AppUser, user_id)
    if not user:
        raise NotFoundError("User")

    if user.Role == ROLE_ADMIN and user.IsActive:
        if _active_admin_count(db) <= 1:
            raise ForbiddenError("Cannot deactivate the last active admin")

    user.IsActive = not user.IsActive
    user = _commit(db, user)
    logger.info("user active flag toggled (UserID=%s, IsActive=%s)", user_id, user.IsActive)
    return user
