"""Shared helpers for laundry service operations."""

import enum
import uuid
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from libs.auth.models import AuthUser
from libs.common.error_handler import AuthenticationError
from services.laundry_service.models import AuditEntityType, AuditLog
from sqlalchemy.ext.asyncio import AsyncSession

CENTS = Decimal("0.01")


def to_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def user_uuid(identity: AuthUser) -> uuid.UUID:
    """The caller's user id as a UUID; a malformed subject is not a valid session."""
    try:
        return uuid.UUID(identity.user_id)
    except ValueError:
        raise AuthenticationError("Could not validate credentials")


def audit_snapshot(values: dict[str, Any]) -> dict[str, Any]:
    """Make field values JSON-safe for the audit log."""
    snapshot = {}
    for key, value in values.items():
        if isinstance(value, enum.Enum):
            value = value.value
        elif isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, (Decimal, uuid.UUID)):
            value = str(value)
        snapshot[key] = value
    return snapshot


async def log_audit(
    db: AsyncSession,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
    action: str,
    performed_by: str,
    old_value: Optional[dict] = None,
    new_value: Optional[dict] = None,
):
    """Log an audit event."""
    audit_log = AuditLog(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        old_value=old_value,
        new_value=new_value,
        performed_by=performed_by,
    )
    db.add(audit_log)
