"""Database models"""

from jacore.models.user import User, Role, user_roles
from jacore.models.security import RefreshToken
from jacore.models.production import ProductionRecord
from jacore.models.audit import AuditEvent

__all__ = ["User", "Role", "user_roles", "RefreshToken", "ProductionRecord", "AuditEvent"]
