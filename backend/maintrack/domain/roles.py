# backend/maintrack/domain/roles.py
from dataclasses import dataclass
from typing import Any, Iterable

from .constants import ALLOWED_ROLES


@dataclass(frozen=True)
class Actor:
    """Kimliği doğrulanmış çağıran: (identity_id, role) çifti."""
    identity_id: int
    role: str

    @classmethod
    def from_user(cls, user: Any) -> "Actor":
        return cls(identity_id=user.UserID, role=user.Role)


def role_of(identity: Any) -> str:
    # Actor -> .role, AppUser -> .Role
    role = getattr(identity, "role", None)
    if role is None:
        role = getattr(identity, "Role", None)
    return role


def has_role(identity: Any, allowed_roles: Iterable[str]) -> bool:
    if identity is None:
        return False
    return role_of(identity) in set(allowed_roles)


def is_valid_role(role: str) -> bool:
    return role in ALLOWED_ROLES
