# backend/maintrack/services/report_service.py
"""
Salt-okunur talep raporları. Mutasyon yok.
"""
from __future__ import annotations
from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..domain.constants import (
    ALLOWED_KINDS,
    ALLOWED_STATUSES,
    STATUS_REPAIRED,
)
from ..models import Equipment, MaintenanceRequest, MaintenanceTeam


def _window(q, col, start: Optional[datetime], end: Optional[datetime]):
    if start:
        q = q.filter(col >= start)
    if end:
        q = q.filter(col < end)
    return q


def requests_by_status(db: Session, *, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Dict[str, Any]:
    q = db.query(MaintenanceRequest.Status_s, func.count(MaintenanceRequest.RequestID))
    q = _window(q, MaintenanceRequest.CreatedAt, start, end)
    counts = dict(q.group_by(MaintenanceRequest.Status_s).all())

    total = sum(counts.values())
    rows = [
        {
            "status": s,
            "count": counts.get(s, 0),
            "percentage": round(counts.get(s, 0) * 100.0 / total, 2) if total else 0.0,
        }
        for s in ALLOWED_STATUSES
    ]
    return {"statusDistribution": rows, "total": total}


def requests_by_team(db: Session, *, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Dict[str, Any]:
    q = (
        db.query(
            MaintenanceTeam.TeamID,
            MaintenanceTeam.Name,
            MaintenanceRequest.Status_s,
            func.count(MaintenanceRequest.RequestID),
        )
        .join(MaintenanceRequest, MaintenanceRequest.TeamID == MaintenanceTeam.TeamID)
    )
    q = _window(q, MaintenanceRequest.CreatedAt, start, end)
    rows = (
        q.group_by(MaintenanceTeam.TeamID, MaintenanceTeam.Name, MaintenanceRequest.Status_s)
        .order_by(MaintenanceTeam.Name)
        .all()
    )

    teams: "OrderedDict[int, Dict[str, Any]]" = OrderedDict()
    for team_id, name, status_s, cnt in rows:
        item = teams.setdefault(team_id, {
            "teamId": team_id,
            "teamName": name,
            "totalRequests": 0,
            "statusBreakdown": {s: 0 for s in ALLOWED_STATUSES},
        })
        item["totalRequests"] += cnt
        item["statusBreakdown"][status_s] = cnt

    items = list(teams.values())
    return {"teams": items, "total": sum(t["totalRequests"] for t in items)}


def requests_by_category(db: Session, *, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Dict[str, Any]:
    q = (
        db.query(
            Equipment.Category,
            MaintenanceRequest.RequestType,
            MaintenanceRequest.Status_s,
            func.count(MaintenanceRequest.RequestID),
        )
        .join(Equipment, Equipment.EquipmentID == MaintenanceRequest.EquipmentID)
    )
    q = _window(q, MaintenanceRequest.CreatedAt, start, end)
    rows = q.group_by(Equipment.Category, MaintenanceRequest.RequestType, MaintenanceRequest.Status_s).all()

    cats: Dict[str, Dict[str, Any]] = {}
    for category, kind, status_s, cnt in rows:
        item = cats.setdefault(category, {
            "category": category,
            "totalRequests": 0,
            **{k: 0 for k in ALLOWED_KINDS},
            **{s: 0 for s in ALLOWED_STATUSES},
        })
        item["totalRequests"] += cnt
        item[kind] += cnt
        item[status_s] += cnt

    items = sorted(cats.values(), key=lambda c: c["category"])
    return {"categories": items, "total": sum(c["totalRequests"] for c in items)}


def _stats(values: List[float]) -> Dict[str, Any]:
    if not values:
        return {"count": 0, "average": 0.0, "min": 0.0, "max": 0.0}
    return {
        "count": len(values),
        "average": round(sum(values) / len(values), 2),
        "min": min(values),
        "max": max(values),
    }


def duration_analysis(db: Session, *, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Dict[str, Any]:
    q = (
        db.query(
            MaintenanceRequest.DurationHours,
            MaintenanceRequest.RequestType,
            MaintenanceTeam.TeamID,
            MaintenanceTeam.Name,
        )
        .join(MaintenanceTeam, MaintenanceTeam.TeamID == MaintenanceRequest.TeamID)
        .filter(
            MaintenanceRequest.Status_s == STATUS_REPAIRED,
            MaintenanceRequest.DurationHours.isnot(None),
        )
    )
    rows = _window(q, MaintenanceRequest.CompletedAt, start, end).all()

    by_kind: Dict[str, List[float]] = {}
    by_team: Dict[int, Dict[str, Any]] = {}
    for hours, kind, team_id, team_name in rows:
        by_kind.setdefault(kind, []).append(hours)
        by_team.setdefault(team_id, {"teamId": team_id, "teamName": team_name, "values": []})["values"].append(hours)

    return {
        "overall": _stats([r[0] for r in rows]),
        "byType": {k: _stats(by_kind.get(k, [])) for k in ALLOWED_KINDS},
        "byTeam": [
            {"teamId": t["teamId"], "teamName": t["teamName"], **_stats(t["values"])}
            for t in sorted(by_team.values(), key=lambda t: t["teamName"])
        ],
    }
