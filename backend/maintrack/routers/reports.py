# backend/maintrack/routers/reports.py
from datetime import date, datetime, time
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.api import ok
from ..core.db import get_db
from ..core.errors import ValidationError
from ..core.security import require_roles
from ..domain.constants import ROLE_ADMIN, ROLE_MANAGER
from ..services import report_service

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
    dependencies=[Depends(require_roles(ROLE_MANAGER, ROLE_ADMIN))],
)

# ---------- Ortak: opsiyonel tarih aralığı ----------
def optional_period(
    start: Optional[date] = Query(None, description="UTC tarih, örn: 2025-08-01"),
    end: Optional[date] = Query(None, description="UTC tarih (hariç), örn: 2025-09-01"),
) -> Tuple[Optional[datetime], Optional[datetime]]:
    if start and end and end <= start:
        raise ValidationError("Invalid range: 'end' must be after 'start' ('end' is exclusive)")
    return (
        datetime.combine(start, time.min) if start else None,
        datetime.combine(end, time.min) if end else None,
    )

def _period_meta(period) -> dict:
    start, end = period
    return {"start": start, "end": end}


@router.get("/requests-by-status")
def requests_by_status(period=Depends(optional_period), db: Session = Depends(get_db)):
    start, end = period
    return ok(report_service.requests_by_status(db, start=start, end=end), meta=_period_meta(period))


@router.get("/requests-by-team")
def requests_by_team(period=Depends(optional_period), db: Session = Depends(get_db)):
    start, end = period
    return ok(report_service.requests_by_team(db, start=start, end=end), meta=_period_meta(period))


@router.get("/requests-by-category")
def requests_by_category(period=Depends(optional_period), db: Session = Depends(get_db)):
    start, end = period
    return ok(report_service.requests_by_category(db, start=start, end=end), meta=_period_meta(period))


@router.get("/duration-analysis")
def duration_analysis(period=Depends(optional_period), db: Session = Depends(get_db)):
    start, end = period
    return ok(report_service.duration_analysis(db, start=start, end=end), meta=_period_meta(period))
