from types import SimpleNamespace

import pytest

from maintrack.core.errors import ForbiddenError
from maintrack.domain import policies
from maintrack.domain.policies import AccessContext, authorize
from maintrack.domain.ports import VisibilityScope
from maintrack.domain.roles import Actor, has_role, is_valid_role


def _req(created_by=1, assigned_to=None, team_id=10):
    return SimpleNamespace(CreatedByID=created_by, AssignedToID=assigned_to, TeamID=team_id)


def test_view_request_by_role():
    req = _req(created_by=1, assigned_to=2, team_id=10)
    view = policies.VIEW_REQUEST

    assert view.allows(AccessContext(Actor(1, "requester"), req))
    assert not view.allows(AccessContext(Actor(9, "requester"), req))
    assert view.allows(AccessContext(Actor(2, "technician"), req))
    assert view.allows(AccessContext(Actor(3, "technician"), req, frozenset({10})))
    assert not view.allows(AccessContext(Actor(3, "technician"), req, frozenset({11})))
    assert view.allows(AccessContext(Actor(7, "manager"), req))
    assert view.allows(AccessContext(Actor(8, "admin"), req))


def test_creator_technician_does_not_see_by_creation():
    # technician kapsamı oluşturucu değil, atama/takım üzerinden
    req = _req(created_by=3, assigned_to=None, team_id=10)
    assert not policies.VIEW_REQUEST.allows(AccessContext(Actor(3, "technician"), req))


def test_claim_policy():
    unassigned = _req(assigned_to=None, team_id=10)
    assigned = _req(assigned_to=2, team_id=10)
    tech = Actor(3, "technician")
    assert policies.CLAIM_REQUEST.allows(AccessContext(tech, unassigned, frozenset({10})))
    assert not policies.CLAIM_REQUEST.allows(AccessContext(tech, unassigned, frozenset({11})))
    assert not policies.CLAIM_REQUEST.allows(AccessContext(tech, assigned, frozenset({10})))


def test_authorize_raises_forbidden():
    with pytest.raises(ForbiddenError) as ei:
        authorize(policies.ASSIGN_TECHNICIAN, AccessContext(Actor(1, "technician")), "nope")
    assert ei.value.status_code == 403
    assert ei.value.message == "nope"
    authorize(policies.ASSIGN_TECHNICIAN, AccessContext(Actor(1, "manager")), "nope")


def test_visibility_scope_for_actor():
    assert VisibilityScope.for_actor(Actor(1, "admin")).unrestricted
    s = VisibilityScope.for_actor(Actor(2, "technician"), {10})
    assert s.matches(_req(assigned_to=2, team_id=99))
    assert s.matches(_req(assigned_to=None, team_id=10))
    assert not s.matches(_req(created_by=2, assigned_to=None, team_id=99))
    r = VisibilityScope.for_actor(Actor(5, "requester"))
    assert r.matches(_req(created_by=5))
    assert not r.matches(_req(created_by=6))


def test_role_helpers():
    assert is_valid_role("technician")
    assert not is_valid_role("store")
    assert has_role(SimpleNamespace(Role="manager"), {"manager", "admin"})
    assert has_role(Actor(1, "admin"), {"admin"})
    assert not has_role(None, {"admin"})
