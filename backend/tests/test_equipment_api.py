from maintrack.models import Equipment, MaintenanceRequest


def _payload(**kw):
    data = {
        "Name": "Hydraulic Press",
        "SerialNumber": "HP-1000",
        "Category": "Machinery",
        "Department": "Production",
        "Location": "Hall B",
        "PurchaseDate": "2024-02-01",
        "WarrantyExpiry": "2026-02-01",
    }
    data.update(kw)
    return data


def test_create_requires_supervisor(client, make_user, headers):
    r = client.post("/equipment", json=_payload(), headers=headers(make_user("technician")))
    assert r.status_code == 403


def test_create_get_update(client, make_user, make_team, headers):
    manager = make_user("manager")
    team = make_team("Mechanics")

    r = client.post("/equipment", json=_payload(DefaultTeamID=team.TeamID), headers=headers(manager))
    assert r.status_code == 201, r.text
    eq = r.json()["data"]
    assert eq["IsScrap"] is False
    assert eq["default_team"]["Name"] == "Mechanics"

    r = client.get(f"/equipment/{eq['EquipmentID']}", headers=headers(make_user()))
    assert r.status_code == 200
    assert r.json()["data"]["SerialNumber"] == "HP-1000"

    r = client.put(f"/equipment/{eq['EquipmentID']}", json={"Location": "Hall C"}, headers=headers(manager))
    assert r.status_code == 200
    assert r.json()["data"]["Location"] == "Hall C"
    assert r.json()["data"]["Name"] == "Hydraulic Press"


def test_create_validation(client, make_user, make_equipment, headers):
    manager = make_user("manager")
    make_equipment(SerialNumber="TAKEN-1")

    r = client.post("/equipment", json=_payload(SerialNumber="TAKEN-1"), headers=headers(manager))
    assert r.status_code == 409

    r = client.post("/equipment", json=_payload(WarrantyExpiry="2023-01-01"), headers=headers(manager))
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"

    r = client.post("/equipment", json=_payload(DefaultTeamID=999), headers=headers(manager))
    assert r.status_code == 404


def test_list_filters_and_pagination(client, make_user, make_equipment, headers):
    for i in range(3):
        make_equipment(category="Machinery")
    make_equipment(category="Electrical", Name="Main Panel")
    make_equipment(category="Electrical", is_scrap=True)
    h = headers(make_user())

    r = client.get("/equipment", params={"category": "Electrical"}, headers=h)
    assert r.json()["meta"]["total"] == 2

    r = client.get("/equipment", params={"isScrap": "false", "limit": 2}, headers=h)
    body = r.json()
    assert body["meta"] == {"page": 1, "limit": 2, "total": 4, "totalPages": 2}
    assert len(body["data"]) == 2

    r = client.get("/equipment", params={"search": "panel"}, headers=h)
    assert [e["Name"] for e in r.json()["data"]] == ["Main Panel"]


def test_scrap_is_idempotent(client, db, make_user, make_equipment, headers):
    manager = make_user("manager")
    eq = make_equipment()
    for _ in range(2):
        r = client.patch(f"/equipment/{eq.EquipmentID}/scrap", headers=headers(manager))
        assert r.status_code == 200
        assert r.json()["data"]["IsScrap"] is True


def test_delete_blocked_by_history(client, db, make_user, make_team, make_equipment, headers):
    manager = make_user("manager")
    requester = make_user()
    team = make_team()
    used = make_equipment(team=team)
    unused = make_equipment(team=team)
    db.add(MaintenanceRequest(
        Subject="Broken belt", RequestType="Corrective", Status_s="New",
        EquipmentID=used.EquipmentID, TeamID=team.TeamID, CreatedByID=requester.UserID,
    ))
    db.commit()

    r = client.delete(f"/equipment/{used.EquipmentID}", headers=headers(manager))
    assert r.status_code == 400
    assert "active maintenance request" in r.json()["error"]["message"]

    r = client.delete(f"/equipment/{unused.EquipmentID}", headers=headers(manager))
    assert r.status_code == 200
    db.expire_all()
    assert db.get(Equipment, unused.EquipmentID) is None


def test_history(client, db, make_user, make_team, make_equipment, headers):
    requester = make_user()
    tech = make_user("technician")
    team = make_team(members=[tech])
    eq = make_equipment(team=team)
    db.add_all([
        MaintenanceRequest(Subject="Noise in gearbox", RequestType="Corrective", Status_s="Repaired",
                           EquipmentID=eq.EquipmentID, TeamID=team.TeamID, CreatedByID=requester.UserID,
                           AssignedToID=tech.UserID, DurationHours=1.5),
        MaintenanceRequest(Subject="Monthly lubrication", RequestType="Preventive", Status_s="New",
                           EquipmentID=eq.EquipmentID, TeamID=team.TeamID, CreatedByID=requester.UserID),
    ])
    db.commit()

    r = client.get(f"/equipment/{eq.EquipmentID}/history", headers=headers(requester))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["stats"] == {"total": 2, "corrective": 1, "preventive": 1, "repaired": 1, "active": 1}
    assert len(data["requests"]) == 2
    assert data["equipment"]["EquipmentID"] == eq.EquipmentID


def test_history_is_scoped_to_visible_requests(client, db, make_user, make_team, make_equipment, headers):
    alice = make_user()
    bob = make_user()
    manager = make_user("manager")
    tech = make_user("technician")
    outsider = make_user("technician")
    team = make_team(members=[tech])
    make_team("Electrical", members=[outsider])
    eq = make_equipment(team=team)
    db.add_all([
        MaintenanceRequest(Subject="Hydraulic leak", RequestType="Corrective", Status_s="New",
                           EquipmentID=eq.EquipmentID, TeamID=team.TeamID, CreatedByID=alice.UserID),
        MaintenanceRequest(Subject="Guard rail loose", RequestType="Corrective", Status_s="Repaired",
                           EquipmentID=eq.EquipmentID, TeamID=team.TeamID, CreatedByID=bob.UserID,
                           AssignedToID=tech.UserID, DurationHours=1),
    ])
    db.commit()

    def history(user):
        r = client.get(f"/equipment/{eq.EquipmentID}/history", headers=headers(user))
        assert r.status_code == 200
        return r.json()["data"]

    data = history(bob)
    assert [x["Subject"] for x in data["requests"]] == ["Guard rail loose"]
    assert data["stats"] == {"total": 1, "corrective": 1, "preventive": 0, "repaired": 1, "active": 0}

    assert history(outsider)["requests"] == []
    assert history(tech)["stats"]["total"] == 2
    assert history(manager)["stats"]["total"] == 2
