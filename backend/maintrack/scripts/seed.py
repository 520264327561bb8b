from contextlib import contextmanager
from datetime import date, timedelta

from sqlalchemy import select

from maintrack.core.clock import utcnow
from maintrack.core.db import Base, SessionLocal, engine
from maintrack.core.security import hash_password
from maintrack.domain.constants import (
    KIND_CORRECTIVE,
    KIND_PREVENTIVE,
    STATUS_IN_PROGRESS,
    STATUS_NEW,
    STATUS_REPAIRED,
)
from maintrack.models import AppUser, Equipment, MaintenanceRequest, MaintenanceTeam

# ---------- küçük yardımcılar ----------

@contextmanager
def session_scope():
    """Tek seferlik session aç/kapat (hata olursa rollback)."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def get_one(db, model, **by):
    """Tekil alanlara göre satır getir (yoksa None)."""
    return db.execute(select(model).filter_by(**by)).scalars().first()

def get_or_create(db, model, unique_by: dict, defaults: dict | None = None):
    """unique_by ile ara, yoksa oluştur (idempotent)."""
    inst = get_one(db, model, **unique_by)
    if inst:
        return inst, False
    data = {**unique_by, **(defaults or {})}
    inst = model(**data)
    db.add(inst)
    # çağıran commit edeceği için burada commit yok
    return inst, True

# ---------- tohum veriler (idempotent) ----------

DEMO_PASSWORD = "password123"

USERS = [
    {"Email": "admin@maintrack.local",     "FullName": "Admin User",        "Role": "admin"},
    {"Email": "manager@maintrack.local",   "FullName": "Selin Yönetici",    "Role": "manager"},
    {"Email": "tech.mech@maintrack.local", "FullName": "Ali Usta",          "Role": "technician"},
    {"Email": "tech.elec@maintrack.local", "FullName": "Zeynep Usta",       "Role": "technician"},
    {"Email": "user@maintrack.local",      "FullName": "Mert Operatör",     "Role": "requester"},
]

TEAMS = [
    {"Name": "Mekanik Ekip",  "Description_s": "Pres, konveyör ve mekanik ekipman", "members": ["tech.mech@maintrack.local"]},
    {"Name": "Elektrik Ekip", "Description_s": "Pano, motor ve kablolama",          "members": ["tech.elec@maintrack.local"]},
]

EQUIPMENT = [
    {"SerialNumber": "PRS-001", "Name": "Pres Hattı", "Category": "Machinery",  "Department": "Production",  "Location": "A-1", "team": "Mekanik Ekip"},
    {"SerialNumber": "KSM-002", "Name": "Kesim",      "Category": "Machinery",  "Department": "Production",  "Location": "B-2", "team": "Mekanik Ekip"},
    {"SerialNumber": "PNO-010", "Name": "Ana Pano",   "Category": "Electrical", "Department": "Maintenance", "Location": "C-1", "team": "Elektrik Ekip"},
]

def run():
    Base.metadata.create_all(bind=engine, checkfirst=True)

    with session_scope() as db:
        # 1) temel tablolar
        print(">> Seeding: AppUser / MaintenanceTeam / Equipment")

        hashed = hash_password(DEMO_PASSWORD)
        for u in USERS:
            get_or_create(db, AppUser, {"Email": u["Email"]}, defaults={**u, "HashedPassword": hashed, "IsActive": True})
        db.flush()

        for t in TEAMS:
            team, created = get_or_create(
                db, MaintenanceTeam, {"Name": t["Name"]},
                defaults={"Description_s": t["Description_s"], "IsActive": True},
            )
            if created:
                team.members = [get_one(db, AppUser, Email=e) for e in t["members"]]
        db.flush()

        today = date.today()
        for e in EQUIPMENT:
            team = get_one(db, MaintenanceTeam, Name=e["team"])
            data = {k: v for k, v in e.items() if k != "team"}
            get_or_create(
                db, Equipment, {"SerialNumber": e["SerialNumber"]},
                defaults={
                    **data,
                    "DefaultTeamID": team.TeamID,
                    "PurchaseDate": today - timedelta(days=400),
                    "WarrantyExpiry": today + timedelta(days=330),
                    "IsScrap": False,
                },
            )

    # 2) örnek talepler (ayrı transaction)
    with session_scope() as db:
        print(">> Seeding: MaintenanceRequest")

        requester = get_one(db, AppUser, Email="user@maintrack.local")
        manager = get_one(db, AppUser, Email="manager@maintrack.local")
        mech = get_one(db, AppUser, Email="tech.mech@maintrack.local")
        press = get_one(db, Equipment, SerialNumber="PRS-001")
        cutter = get_one(db, Equipment, SerialNumber="KSM-002")
        panel = get_one(db, Equipment, SerialNumber="PNO-010")
        now = utcnow()

        samples = [
            {"Subject": "Yağ sızıntısı var", "RequestType": KIND_CORRECTIVE, "Status_s": STATUS_NEW,
             "equipment": press, "CreatedByID": requester.UserID},
            {"Subject": "Bıçak körelmiş", "RequestType": KIND_CORRECTIVE, "Status_s": STATUS_IN_PROGRESS,
             "equipment": cutter, "CreatedByID": requester.UserID, "AssignedToID": mech.UserID},
            {"Subject": "Keçe değişimi yapıldı", "RequestType": KIND_CORRECTIVE, "Status_s": STATUS_REPAIRED,
             "equipment": press, "CreatedByID": requester.UserID, "AssignedToID": mech.UserID,
             "CompletedAt": now - timedelta(days=2), "DurationHours": 3.5},
            {"Subject": "Aylık pano kontrolü", "RequestType": KIND_PREVENTIVE, "Status_s": STATUS_NEW,
             "equipment": panel, "CreatedByID": manager.UserID, "ScheduledDate": now + timedelta(days=7)},
        ]
        for s in samples:
            eq = s.pop("equipment")
            get_or_create(
                db, MaintenanceRequest, {"Subject": s["Subject"]},
                defaults={**s, "EquipmentID": eq.EquipmentID, "TeamID": eq.DefaultTeamID},
            )

    print("Seed tamam.")

if __name__ == "__main__":
    run()
