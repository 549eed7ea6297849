"""Ruter Stats?"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ghdeploy.config import settings
from ghdeploy.db import get_db
from ghdeploy.models import DeliveryLog
from ghdeploy.schemas import DeliveryOut
from ghdeploy.timezone import TZ

router = APIRouter(prefix="/stats", tags=["Stats"])


def _check_admin_key(key_from_request: Optional[str]) -> bool:
    admin_key = settings.admin_http_key
    if not admin_key:
        return True
    return (key_from_request or "") == admin_key


def _fmt_dt(value: Optional[datetime]) -> Optional[str]:
    if not value:
        return None
    if value.tzinfo:
        return value.astimezone(TZ).isoformat()
    return value.replace(tzinfo=TZ).isoformat()


@router.get("/deliveries", response_model=list[DeliveryOut])
def recent_deliveries(
    key: Optional[str] = Query(None, alias="key"),
    limit: int = Query(50, ge=1, le=500),
    outcome: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Latest handled notifications, newest first."""
    if not _check_admin_key(key):
        raise HTTPException(403, "Forbidden")

    q = db.query(DeliveryLog)
    if outcome:
        q = q.filter(DeliveryLog.outcome == outcome)
    rows = q.order_by(DeliveryLog.id.desc()).limit(limit).all()
    return [
        DeliveryOut(
            id=row.id,
            created_at=_fmt_dt(row.created_at),
            build_id=row.build_id or "",
            build_status=row.build_status or "",
            trigger_id=row.trigger_id or "",
            outcome=row.outcome or "",
            reason=row.reason or "",
            target_url=row.target_url or "",
            status_code=row.status_code,
            deployment_id=row.deployment_id,
        )
        for row in rows
    ]
