"""Audit log API endpoints (admin only).

Listing uses cursor pagination over (created_at, id), newest first. The
cursor is opaque to clients: url-safe base64 of "<iso timestamp>|<uuid>".
"""

import base64
import csv
import io
import json
from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from changerawr.api.deps import get_db, get_current_user
from changerawr.api.schemas.audit import AuditLogListResponse, AuditLogResponse
from changerawr.core.errors import ValidationError
from changerawr.core.rbac import require_permission
from changerawr.db.models import AuditLog, User

router = APIRouter(prefix="/admin/audit-logs", tags=["audit"])

EXPORT_LIMIT = 10000


def encode_cursor(log: AuditLog) -> str:
    raw = f"{log.created_at.isoformat()}|{log.id}"
    return base64.urlsafe_b64encode(raw.encode()).decode()


def decode_cursor(cursor: str) -> Tuple[datetime, UUID]:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        created_at, log_id = raw.split("|", 1)
        return datetime.fromisoformat(created_at), UUID(log_id)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError("Invalid cursor", details=[{"field": "cursor", "message": "malformed"}])


def filtered_query(
    db: Session,
    action: Optional[str],
    user_id: Optional[UUID],
    from_date: Optional[datetime],
    to_date: Optional[datetime],
    search: Optional[str],
):
    query = db.query(AuditLog)
    if action:
        query = query.filter(AuditLog.action == action)
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)
    if from_date:
        query = query.filter(AuditLog.created_at >= from_date)
    if to_date:
        query = query.filter(AuditLog.created_at <= to_date)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(AuditLog.action.ilike(pattern), AuditLog.resource_type.ilike(pattern)))
    return query


@router.get("", response_model=AuditLogListResponse)
@require_permission("audit_logs:list")
async def list_audit_logs(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    cursor: Optional[str] = None,
    limit: int = Query(50, ge=1, le=100),
    action: Optional[str] = None,
    user_id: Optional[UUID] = Query(None, alias="userId"),
    from_date: Optional[datetime] = Query(None, alias="from"),
    to_date: Optional[datetime] = Query(None, alias="to"),
    search: Optional[str] = None,
):
    """List audit logs, newest first."""
    query = filtered_query(db, action, user_id, from_date, to_date, search)

    if cursor:
        created_at, log_id = decode_cursor(cursor)
        query = query.filter(
            or_(
                AuditLog.created_at < created_at,
                and_(AuditLog.created_at == created_at, AuditLog.id < log_id),
            )
        )

    logs = query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit + 1).all()

    next_cursor = None
    if len(logs) > limit:
        logs = logs[:limit]
        next_cursor = encode_cursor(logs[-1])

    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(log) for log in logs],
        next_cursor=next_cursor,
    )


@router.get("/export")
@require_permission("audit_logs:export")
async def export_audit_logs_csv(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    action: Optional[str] = None,
    user_id: Optional[UUID] = Query(None, alias="userId"),
    from_date: Optional[datetime] = Query(None, alias="from"),
    to_date: Optional[datetime] = Query(None, alias="to"),
    search: Optional[str] = None,
):
    """Export audit logs as CSV."""
    logs = (
        filtered_query(db, action, user_id, from_date, to_date, search)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(EXPORT_LIMIT)
        .all()
    )

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([
        "id", "created_at", "user_id", "action", "resource_type",
        "resource_id", "project_id", "severity", "ip_address", "details",
    ])
    for log in logs:
        writer.writerow([
            str(log.id),
            log.created_at.isoformat() if log.created_at else "",
            str(log.user_id) if log.user_id else "",
            log.action,
            log.resource_type,
            str(log.resource_id) if log.resource_id else "",
            str(log.project_id) if log.project_id else "",
            log.severity,
            log.ip_address or "",
            json.dumps(log.details) if log.details else "",
        ])

    output.seek(0)
    filename = f"audit_logs_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}.csv"

    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
