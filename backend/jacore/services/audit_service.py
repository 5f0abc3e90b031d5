"""Audit service for sensitive user and session events."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from jacore.models.audit import AuditEvent
from jacore.schemas.audit import AuditEventResponse


class AuditService:
    """Persist immutable audit trail entries."""

    @staticmethod
    def log_event(
        db: Session,
        *,
        user_id: Optional[str],
        action: str,
        target_type: Optional[str] = None,
        target_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        event = AuditEvent(
            user_id=user_id,
            action=action,
            target_type=target_type,
            target_id=target_id,
            ip_address=ip_address,
            metadata_json=json.dumps(metadata or {}, ensure_ascii=False),
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def list_events(
        db: Session,
        *,
        action: Optional[str] = None,
        limit: int = 100,
    ) -> List[AuditEventResponse]:
        query = db.query(AuditEvent)
        if action:
            query = query.filter(AuditEvent.action == action)
        events = query.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(max(1, min(limit, 500))).all()
        return [
            AuditEventResponse(
                id=event.id,
                user_id=event.user_id,
                email=event.user.email if event.user else None,
                action=event.action,
                target_type=event.target_type,
                target_id=event.target_id,
                ip_address=event.ip_address,
                metadata=json.loads(event.metadata_json or "{}"),
                created_at=event.created_at,
            )
            for event in events
        ]


audit_service = AuditService()
