# backend/maintrack/domain/policies.py
"""
Operasyon bazlı bildirimsel yetki politikaları.

Her operasyonun kuralı burada tek satırda okunur; servis gövdesi çalışmadan
önce `authorize(...)` ile aynı şekilde değerlendirilir.
"""
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Optional, Tuple

from ..core.errors import ForbiddenError
from .constants import (
    ROLE_REQUESTER,
    ROLE_TECHNICIAN,
    SUPERVISOR_ROLES,
)
from .roles import Actor


@dataclass(frozen=True)
class AccessContext:
    actor: Actor
    request: Optional[Any] = None
    # aktörün üyesi olduğu takımlar (InTeam için)
    team_ids: FrozenSet[int] = field(default_factory=frozenset)


class Policy:
    def allows(self, ctx: AccessContext) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class RoleIn(Policy):
    roles: FrozenSet[str]

    def allows(self, ctx: AccessContext) -> bool:
        return ctx.actor.role in self.roles


@dataclass(frozen=True)
class IsAssignee(Policy):
    def allows(self, ctx: AccessContext) -> bool:
        return ctx.request is not None and ctx.request.AssignedToID == ctx.actor.identity_id


@dataclass(frozen=True)
class IsUnassigned(Policy):
    def allows(self, ctx: AccessContext) -> bool:
        return ctx.request is not None and ctx.request.AssignedToID is None


@dataclass(frozen=True)
class IsCreator(Policy):
    def allows(self, ctx: AccessContext) -> bool:
        return ctx.request is not None and ctx.request.CreatedByID == ctx.actor.identity_id


@dataclass(frozen=True)
class InTeam(Policy):
    def allows(self, ctx: AccessContext) -> bool:
        return ctx.request is not None and ctx.request.TeamID in ctx.team_ids


@dataclass(frozen=True)
class AnyOf(Policy):
    policies: Tuple[Policy, ...]

    def allows(self, ctx: AccessContext) -> bool:
        return any(p.allows(ctx) for p in self.policies)


@dataclass(frozen=True)
class AllOf(Policy):
    policies: Tuple[Policy, ...]

    def allows(self, ctx: AccessContext) -> bool:
        return all(p.allows(ctx) for p in self.policies)


def any_of(*policies: Policy) -> AnyOf:
    return AnyOf(tuple(policies))


def all_of(*policies: Policy) -> AllOf:
    return AllOf(tuple(policies))


def role_in(*roles: str) -> RoleIn:
    return RoleIn(frozenset(roles))


SUPERVISOR = RoleIn(SUPERVISOR_ROLES)

# ---- Operasyon -> politika tablosu ----
CREATE_PREVENTIVE = SUPERVISOR
UPDATE_REQUEST_FIELDS = any_of(SUPERVISOR, IsAssignee())
TRANSITION_STATUS = any_of(SUPERVISOR, IsAssignee())
# atanmamış talebi InProgress'e çeken takım teknisyeni onu sahiplenir
CLAIM_REQUEST = all_of(role_in(ROLE_TECHNICIAN), InTeam(), IsUnassigned())
ASSIGN_TECHNICIAN = SUPERVISOR
VIEW_REQUEST = any_of(
    SUPERVISOR,
    all_of(role_in(ROLE_REQUESTER), IsCreator()),
    all_of(role_in(ROLE_TECHNICIAN), any_of(IsAssignee(), InTeam())),
)


def authorize(policy: Policy, ctx: AccessContext, message: str) -> None:
    if not policy.allows(ctx):
        raise ForbiddenError(message)
