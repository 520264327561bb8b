# backend/tests/conftest.py
import os

# Uygulama import edilmeden önce: bellek içi SQLite (StaticPool, tek bağlantı)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("AUTO_CREATE_TABLES", "1")

from datetime import date

import pytest
from fastapi.testclient import TestClient

from maintrack.core.db import Base, SessionLocal, engine
from maintrack.core.security import create_access_token, hash_password
from maintrack.main import app
from maintrack.models import AppUser, Equipment, MaintenanceTeam

# bcrypt yavaş; tüm test kullanıcıları aynı hash'i paylaşır
TEST_PASSWORD = "secret123"
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture(autouse=True)
def _fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="requester", email=None, full_name=None, is_active=True):
        counter["n"] += 1
        user = AppUser(
            Email=email or f"{role}{counter['n']}@example.com",
            FullName=full_name or f"{role.title()} {counter['n']}",
            Role=role,
            IsActive=is_active,
            HashedPassword=TEST_PASSWORD_HASH,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_team(db):
    def _make(name="Mechanics", members=()):
        team = MaintenanceTeam(Name=name, IsActive=True)
        team.members = list(members)
        db.add(team)
        db.commit()
        db.refresh(team)
        return team

    return _make


@pytest.fixture
def make_equipment(db):
    counter = {"n": 0}

    def _make(team=None, category="Machinery", is_scrap=False, **kw):
        counter["n"] += 1
        eq = Equipment(
            Name=kw.pop("Name", f"Press {counter['n']}"),
            SerialNumber=kw.pop("SerialNumber", f"SN-{counter['n']:04d}"),
            Category=category,
            Department=kw.pop("Department", "Production"),
            Location=kw.pop("Location", "Hall A"),
            DefaultTeamID=team.TeamID if team else None,
            PurchaseDate=kw.pop("PurchaseDate", date(2024, 1, 1)),
            IsScrap=is_scrap,
            **kw,
        )
        db.add(eq)
        db.commit()
        db.refresh(eq)
        return eq

    return _make


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.UserID, user.Role)}"}


@pytest.fixture
def headers():
    return auth_headers
