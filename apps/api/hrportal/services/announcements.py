import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from hrportal.models.announcement import Announcement
from hrportal.models.audit_log import AuditAction
from hrportal.models.user import User
from hrportal.services.audit import RequestMeta, record_audit
from hrportal.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 2
MIN_BODY_LENGTH = 10
PORTAL_ANNOUNCEMENT_LIMIT = 5


def _validate(title: Optional[str], body: Optional[str]) -> tuple:
    title = (title or "").strip()
    body = (body or "").strip()
    if len(title) < MIN_TITLE_LENGTH:
        raise ValidationError("Title is required")
    if len(body) < MIN_BODY_LENGTH:
        raise ValidationError("Body must be at least 10 characters")
    return title, body


def _audit(db: Session, admin: User, announcement_id: UUID, meta: Optional[RequestMeta], details: dict):
    # announcements are portal-wide content, logged as settings changes
    meta = meta or RequestMeta()
    record_audit(
        db,
        action=AuditAction.SETTINGS_UPDATE,
        entity_type="Announcement",
        user_id=admin.user_id,
        entity_id=announcement_id,
        details=details,
        ip_address=meta.ip_address,
        user_agent=meta.user_agent,
    )


def list_announcements(db: Session) -> list:
    return db.execute(
        select(Announcement).order_by(Announcement.created_at.desc())
    ).scalars().all()


def list_active_announcements(db: Session, limit: int = PORTAL_ANNOUNCEMENT_LIMIT) -> list:
    """What employees see on the portal home page."""
    return db.execute(
        select(Announcement)
        .where(Announcement.is_active.is_(True))
        .order_by(Announcement.created_at.desc())
        .limit(limit)
    ).scalars().all()


def get_announcement(db: Session, announcement_id: UUID) -> Announcement:
    announcement = db.get(Announcement, announcement_id)
    if not announcement:
        raise NotFoundError("Announcement not found")
    return announcement


def create_announcement(
    db: Session,
    admin: User,
    title: Optional[str],
    body: Optional[str],
    is_active: bool = True,
    meta: Optional[RequestMeta] = None,
) -> Announcement:
    title, body = _validate(title, body)
    announcement = Announcement(
        title=title,
        body=body,
        is_active=is_active,
        created_by_admin_id=admin.user_id,
    )
    db.add(announcement)
    db.commit()
    db.refresh(announcement)

    _audit(db, admin, announcement.announcement_id, meta, {"action": "announcement_created", "title": title})
    logger.info("Announcement %s created by %s", announcement.announcement_id, admin.user_id)
    return announcement


def update_announcement(
    db: Session,
    admin: User,
    announcement_id: UUID,
    title: Optional[str],
    body: Optional[str],
    is_active: bool = True,
    meta: Optional[RequestMeta] = None,
) -> Announcement:
    """Replace title, body and visibility of an existing announcement."""
    announcement = get_announcement(db, announcement_id)
    title, body = _validate(title, body)

    announcement.title = title
    announcement.body = body
    announcement.is_active = is_active
    db.commit()
    db.refresh(announcement)

    _audit(db, admin, announcement_id, meta, {"action": "announcement_updated", "is_active": is_active})
    return announcement


def delete_announcement(db: Session, admin: User, announcement_id: UUID, meta: Optional[RequestMeta] = None) -> None:
    announcement = get_announcement(db, announcement_id)
    title = announcement.title
    db.delete(announcement)
    db.commit()

    _audit(db, admin, announcement_id, meta, {"action": "announcement_deleted", "title": title})
