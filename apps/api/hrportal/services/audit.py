"""
Append-only audit trail.

``record_audit`` never raises: an audit outage must not block the operation
it describes, so failures are rolled back and logged here.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hrportal.models.audit_log import AuditAction, AuditLog

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 200


@dataclass
class RequestMeta:
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RequestMeta":
        return cls(ip_address=client_ip(headers), user_agent=headers.get("user-agent"))


def client_ip(headers: Mapping[str, str]) -> Optional[str]:
    """Client address from common proxy headers."""
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return headers.get("x-real-ip")


def record_audit(
    db: Session,
    action: AuditAction,
    entity_type: str,
    user_id: Optional[UUID] = None,
    entity_id: Any = None,
    details: Optional[dict] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> None:
    """Append one audit row and commit it. Callers commit their own work first."""
    try:
        db.add(
            AuditLog(
                user_id=user_id,
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else None,
                details=json.dumps(details, default=str) if details else None,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to create audit log for %s", getattr(action, "value", action))


def list_audit_logs(
    db: Session,
    page: int = 1,
    limit: int = 50,
    action: Optional[AuditAction] = None,
    user_id: Optional[UUID] = None,
    entity_type: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> Tuple[list, int]:
    """Newest-first page of audit rows matching the filters, plus the total match count."""
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    conditions = []
    if action is not None:
        conditions.append(AuditLog.action == action)
    if user_id is not None:
        conditions.append(AuditLog.user_id == user_id)
    if entity_type:
        conditions.append(AuditLog.entity_type == entity_type)
    if start is not None:
        conditions.append(AuditLog.created_at >= start)
    if end is not None:
        conditions.append(AuditLog.created_at <= end)

    total = db.execute(select(func.count()).select_from(AuditLog).where(*conditions)).scalar_one()
    rows = db.execute(
        select(AuditLog)
        .where(*conditions)
        .order_by(AuditLog.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).scalars().all()
    return rows, total
