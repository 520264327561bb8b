from datetime import timedelta

import pytest

from maintrack.core.clock import utcnow
from maintrack.models import Equipment


@pytest.fixture
def setup(make_user, make_team, make_equipment):
    users = {
        "requester": make_user("requester"),
        "other": make_user("requester"),
        "tech": make_user("technician"),
        "outsider": make_user("technician"),
        "manager": make_user("manager"),
        "admin": make_user("admin"),
    }
    team = make_team("Mechanics", members=[users["tech"]])
    other_team = make_team("Electrical", members=[users["outsider"]])
    eq = make_equipment(team=team)
    return users, team, other_team, eq


def _create(client, headers, user, eq, **kw):
    body = {"Subject": "Oil leak on press", "RequestType": "Corrective", "EquipmentID": eq.EquipmentID}
    body.update(kw)
    return client.post("/requests", json=body, headers=headers(user))


def test_create_returns_denormalized_request(client, headers, setup):
    users, team, _, eq = setup
    r = _create(client, headers, users["requester"], eq)
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["Status_s"] == "New"
    assert data["TeamID"] == team.TeamID
    assert data["team"]["Name"] == "Mechanics"
    assert data["equipment"]["SerialNumber"] == eq.SerialNumber
    assert data["created_by"]["UserID"] == users["requester"].UserID
    assert data["assigned_to"] is None


def test_create_validation_errors(client, headers, setup, make_equipment):
    users, _, _, eq = setup
    r = _create(client, headers, users["requester"], eq, Subject="abc")
    assert r.status_code == 422

    r = _create(client, headers, users["requester"], eq, RequestType="Preventive",
                ScheduledDate="2026-12-01T09:00:00Z")
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "FORBIDDEN"

    scrapped = make_equipment(is_scrap=True)
    r = _create(client, headers, users["requester"], scrapped)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_OPERATION"

    r = _create(client, headers, users["manager"], eq, AssignedToID=users["outsider"].UserID)
    assert r.status_code == 400


def test_list_is_scoped(client, headers, setup):
    users, _, other_team, eq = setup
    _create(client, headers, users["requester"], eq)
    _create(client, headers, users["other"], eq)
    _create(client, headers, users["manager"], eq, TeamID=other_team.TeamID)

    def total(user, **params):
        r = client.get("/requests", params=params, headers=headers(user))
        assert r.status_code == 200
        return r.json()["meta"]["total"]

    assert total(users["requester"]) == 1
    assert total(users["tech"]) == 2
    assert total(users["outsider"]) == 1
    assert total(users["manager"]) == 3
    assert total(users["admin"], teamId=other_team.TeamID) == 1
    assert total(users["admin"], search="OIL LEAK") == 3


def test_detail_out_of_scope_is_forbidden(client, headers, setup):
    users, _, _, eq = setup
    rid = _create(client, headers, users["requester"], eq).json()["data"]["RequestID"]

    assert client.get(f"/requests/{rid}", headers=headers(users["requester"])).status_code == 200
    assert client.get(f"/requests/{rid}", headers=headers(users["other"])).status_code == 403
    assert client.get(f"/requests/{rid}", headers=headers(users["outsider"])).status_code == 403
    assert client.get("/requests/9999", headers=headers(users["admin"])).status_code == 404


def test_end_to_end_lifecycle(client, db, headers, setup):
    users, team, _, eq = setup
    r = _create(client, headers, users["manager"], eq)
    rid = r.json()["data"]["RequestID"]

    r = client.patch(f"/requests/{rid}/status", json={"Status_s": "InProgress"}, headers=headers(users["tech"]))
    assert r.status_code == 200, r.text
    assert r.json()["data"]["AssignedToID"] == users["tech"].UserID

    r = client.patch(f"/requests/{rid}/status", json={"Status_s": "Repaired"}, headers=headers(users["tech"]))
    assert r.status_code == 400

    r = client.patch(f"/requests/{rid}/status", json={"Status_s": "Repaired", "DurationHours": 2.5},
                     headers=headers(users["tech"]))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["Status_s"] == "Repaired"
    assert data["DurationHours"] == 2.5
    assert data["CompletedAt"] is not None

    r = client.patch(f"/requests/{rid}/status", json={"Status_s": "Scrap"}, headers=headers(users["manager"]))
    assert r.status_code == 409
    err = r.json()["error"]
    assert err["code"] == "INVALID_TRANSITION"
    assert err["details"] == {"from": "Repaired", "to": "Scrap"}

    db.expire_all()
    assert db.get(Equipment, eq.EquipmentID).IsScrap is False


def test_scrap_cascades_to_equipment(client, db, headers, setup):
    users, _, _, eq = setup
    rid = _create(client, headers, users["requester"], eq).json()["data"]["RequestID"]

    r = client.patch(f"/requests/{rid}/status", json={"Status_s": "Scrap"}, headers=headers(users["manager"]))
    assert r.status_code == 200
    assert r.json()["data"]["equipment"]["IsScrap"] is True

    db.expire_all()
    assert db.get(Equipment, eq.EquipmentID).IsScrap is True
    assert _create(client, headers, users["requester"], eq).status_code == 400


def test_assign_and_update(client, headers, setup):
    users, _, _, eq = setup
    rid = _create(client, headers, users["requester"], eq).json()["data"]["RequestID"]

    r = client.patch(f"/requests/{rid}/assign", json={"TechnicianID": users["tech"].UserID},
                     headers=headers(users["tech"]))
    assert r.status_code == 403

    r = client.patch(f"/requests/{rid}/assign", json={"TechnicianID": users["tech"].UserID},
                     headers=headers(users["manager"]))
    assert r.status_code == 200
    assert r.json()["data"]["Status_s"] == "InProgress"

    r = client.put(f"/requests/{rid}", json={"Description_s": "Seal replaced"}, headers=headers(users["requester"]))
    assert r.status_code == 403

    r = client.put(f"/requests/{rid}", json={"Description_s": "Seal replaced"}, headers=headers(users["tech"]))
    assert r.status_code == 200
    assert r.json()["data"]["Description_s"] == "Seal replaced"
    assert r.json()["data"]["Subject"] == "Oil leak on press"

    r = client.put(f"/requests/{rid}", json={"Description_s": None}, headers=headers(users["tech"]))
    assert r.json()["data"]["Description_s"] is None


def test_calendar_and_overdue(client, headers, setup):
    users, _, _, eq = setup
    now = utcnow()
    past = (now - timedelta(days=2)).isoformat()
    future = (now + timedelta(days=5)).isoformat()
    _create(client, headers, users["manager"], eq, RequestType="Preventive", Subject="Quarterly check", ScheduledDate=past)
    _create(client, headers, users["manager"], eq, RequestType="Preventive", Subject="Annual check", ScheduledDate=future)

    r = client.get("/requests/calendar", params={
        "startDate": (now - timedelta(days=10)).isoformat(),
        "endDate": (now + timedelta(days=10)).isoformat(),
    }, headers=headers(users["tech"]))
    assert r.status_code == 200
    assert [x["Subject"] for x in r.json()["data"]] == ["Quarterly check", "Annual check"]

    r = client.get("/requests/overdue", headers=headers(users["manager"]))
    assert [x["Subject"] for x in r.json()["data"]] == ["Quarterly check"]

    r = client.get("/requests/overdue", headers=headers(users["requester"]))
    assert r.json()["data"] == []
