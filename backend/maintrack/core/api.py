# backend/maintrack/core/api.py
from __future__ import annotations
import math
from typing import Any, Dict, Optional, Sequence
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

# Tüm JSON cevaplarda UTF-8 charset
class UTF8JSONResponse(JSONResponse):
    media_type = "application/json; charset=utf-8"

def list_meta(items: Optional[Sequence[Any]] = None, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    meta: Dict[str, Any] = {}
    if items is not None:
        meta["count"] = len(items)
    if extra:
        meta.update(extra)
    return meta

def page_meta(page: int, limit: int, total: int) -> Dict[str, Any]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }

def ok(data: Any = True, meta: Optional[Dict[str, Any]] = None, status_code: int = 200, message: Optional[str] = None):
    payload: Dict[str, Any] = {"ok": True, "data": jsonable_encoder(data)}
    if message:
        payload["message"] = message
    if meta:
        payload["meta"] = jsonable_encoder(meta)
    return UTF8JSONResponse(content=payload, status_code=status_code)

def fail(code: str, message: str, status_code: int = 400, details: Any = None, headers: Optional[Dict[str, str]] = None):
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = jsonable_encoder(details)
    return UTF8JSONResponse(content={"ok": False, "error": error}, status_code=status_code, headers=headers)
