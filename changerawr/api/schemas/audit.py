from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from changerawr.api.schemas.common import APIModel


class AuditLogResponse(APIModel):
    id: UUID
    user_id: Optional[UUID] = None
    action: str
    resource_type: str
    resource_id: Optional[UUID] = None
    project_id: Optional[UUID] = None
    details: Optional[Dict[str, Any]] = None
    severity: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime


class AuditLogListResponse(APIModel):
    items: List[AuditLogResponse]
    next_cursor: Optional[str] = None
