# backend/maintrack/domain/ports.py
"""
Talep motorunun dış bağımlılıkları (ekipman, takım, kimlik, talep deposu).

Motor bu arayüzleri constructor'da alır; uygulamada SQLAlchemy
implementasyonları (services/repositories.py), testlerde bellek içi sahteler
kullanılır.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, FrozenSet, List, Optional, Protocol, Set, Tuple

from .constants import OPEN_STATUSES, ROLE_TECHNICIAN, SUPERVISOR_ROLES
from .roles import Actor


class EquipmentRegistry(Protocol):
    def find_by_id(self, equipment_id: int) -> Optional[Any]: ...
    def mark_scrap(self, equipment_id: int) -> None: ...


class TeamRegistry(Protocol):
    def find_by_id(self, team_id: int) -> Optional[Any]: ...
    def is_member(self, team_id: int, identity_id: int) -> bool: ...
    def teams_for_member(self, identity_id: int) -> Set[int]: ...


class IdentityDirectory(Protocol):
    def find_by_id(self, identity_id: int) -> Optional[Any]: ...


@dataclass(frozen=True)
class VisibilityScope:
    """Rol bazlı satır filtresi; açık filtrelerden önce uygulanır."""
    unrestricted: bool = False
    created_by_id: Optional[int] = None
    member_id: Optional[int] = None
    team_ids: FrozenSet[int] = field(default_factory=frozenset)

    @classmethod
    def for_actor(cls, actor: Actor, team_ids: Optional[Set[int]] = None) -> "VisibilityScope":
        if actor.role in SUPERVISOR_ROLES:
            return cls(unrestricted=True)
        if actor.role == ROLE_TECHNICIAN:
            return cls(member_id=actor.identity_id, team_ids=frozenset(team_ids or ()))
        # requester (ve tanınmayan roller) yalnızca kendi açtıklarını görür
        return cls(created_by_id=actor.identity_id)

    def matches(self, request: Any) -> bool:
        if self.unrestricted:
            return True
        if self.member_id is not None:
            return request.AssignedToID == self.member_id or request.TeamID in self.team_ids
        return request.CreatedByID == self.created_by_id


@dataclass(frozen=True)
class RequestFilters:
    status: Optional[str] = None
    request_type: Optional[str] = None
    equipment_id: Optional[int] = None
    team_id: Optional[int] = None
    assigned_to_id: Optional[int] = None
    created_by_id: Optional[int] = None
    search: Optional[str] = None
    scheduled_from: Optional[datetime] = None
    scheduled_to: Optional[datetime] = None
    scheduled_before: Optional[datetime] = None
    open_only: bool = False

    def matches(self, r: Any) -> bool:
        if self.status and r.Status_s != self.status:
            return False
        if self.request_type and r.RequestType != self.request_type:
            return False
        if self.equipment_id is not None and r.EquipmentID != self.equipment_id:
            return False
        if self.team_id is not None and r.TeamID != self.team_id:
            return False
        if self.assigned_to_id is not None and r.AssignedToID != self.assigned_to_id:
            return False
        if self.created_by_id is not None and r.CreatedByID != self.created_by_id:
            return False
        if self.search:
            needle = self.search.lower()
            hay = f"{r.Subject or ''}\n{r.Description_s or ''}".lower()
            if needle not in hay:
                return False
        if self.scheduled_from or self.scheduled_to or self.scheduled_before:
            if r.ScheduledDate is None:
                return False
            if self.scheduled_from and r.ScheduledDate < self.scheduled_from:
                return False
            if self.scheduled_to and r.ScheduledDate > self.scheduled_to:
                return False
            if self.scheduled_before and r.ScheduledDate >= self.scheduled_before:
                return False
        if self.open_only and r.Status_s not in OPEN_STATUSES:
            return False
        return True


class RequestStore(Protocol):
    def get(self, request_id: int, *, for_update: bool = False) -> Optional[Any]: ...
    def add(self, request: Any) -> Any: ...
    def save(self, request: Any) -> Any: ...
    def find(
        self,
        filters: RequestFilters,
        scope: VisibilityScope,
        *,
        order_by: str = "-CreatedAt",
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Any], int]: ...
