# backend/tests/test_concurrency.py
"""Aynı talebe eşzamanlı iki yazma: biri kazanır, diğeri Conflict alır."""
import pytest
from sqlalchemy.orm import sessionmaker

from conftest import TEST_PASSWORD_HASH
from maintrack.core.db import Base, build_engine
from maintrack.core.errors import ConflictError, InvalidTransitionError
from maintrack.domain.roles import Actor
from maintrack.models import AppUser, Equipment, MaintenanceRequest, MaintenanceTeam
from maintrack.routers.deps import get_lifecycle_engine
from maintrack.services.repositories import SqlRequestStore


@pytest.fixture
def file_db(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'race.db'}")
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    with Session() as s:
        manager = AppUser(Email="m@example.com", FullName="Manager", Role="manager", HashedPassword=TEST_PASSWORD_HASH)
        tech = AppUser(Email="t@example.com", FullName="Tech", Role="technician", HashedPassword=TEST_PASSWORD_HASH)
        team = MaintenanceTeam(Name="Mechanics", members=[tech])
        s.add_all([manager, tech, team])
        s.flush()
        eq = Equipment(Name="Press", SerialNumber="SN-RACE", Category="Machinery", Department="Production",
                       Location="Hall A", DefaultTeamID=team.TeamID, IsScrap=False)
        s.add(eq)
        s.flush()
        req = MaintenanceRequest(Subject="Race condition", RequestType="Corrective", Status_s="InProgress",
                                 EquipmentID=eq.EquipmentID, TeamID=team.TeamID,
                                 CreatedByID=manager.UserID, AssignedToID=tech.UserID)
        s.add(req)
        s.commit()
        ids = {"request": req.RequestID, "equipment": eq.EquipmentID,
               "manager": manager.UserID, "tech": tech.UserID}

    yield Session, ids
    engine.dispose()


def test_stale_write_is_rejected(file_db):
    Session, ids = file_db
    s1, s2 = Session(), Session()
    try:
        a = SqlRequestStore(s1).get(ids["request"], for_update=True)
        b = SqlRequestStore(s2).get(ids["request"], for_update=True)

        a.Status_s, a.DurationHours = "Repaired", 2.0
        SqlRequestStore(s1).save(a)

        b.Status_s = "Scrap"
        with pytest.raises(ConflictError):
            SqlRequestStore(s2).save(b)
    finally:
        s1.close()
        s2.close()

    with Session() as s:
        assert s.get(MaintenanceRequest, ids["request"]).Status_s == "Repaired"
        assert s.get(Equipment, ids["equipment"]).IsScrap is False


def test_second_transition_sees_committed_state(file_db):
    Session, ids = file_db
    s1, s2 = Session(), Session()
    try:
        tech = Actor(ids["tech"], "technician")
        manager = Actor(ids["manager"], "manager")
        get_lifecycle_engine(s1).transition_status(ids["request"], "Repaired", tech, duration_hours=1.5)
        with pytest.raises(InvalidTransitionError):
            get_lifecycle_engine(s2).transition_status(ids["request"], "Scrap", manager)
    finally:
        s1.close()
        s2.close()
