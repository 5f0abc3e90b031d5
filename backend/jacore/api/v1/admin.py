"""Admin routes - audit trail"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from jacore.core.database import get_db
from jacore.schemas.audit import AuditEventResponse
from jacore.schemas.user import RoleName
from jacore.services.audit_service import audit_service
from jacore.api.deps import require_roles
from jacore.models.user import User

router = APIRouter()


@router.get("/audit-events", response_model=List[AuditEventResponse])
def get_audit_events(
    limit: int = 100,
    action: Optional[str] = None,
    current_user: User = Depends(require_roles(RoleName.ADMIN.value)),
    db: Session = Depends(get_db),
):
    """List recent audit trail entries."""
    return audit_service.list_events(db, action=action, limit=limit)
