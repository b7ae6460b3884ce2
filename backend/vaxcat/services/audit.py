"""Module: audit."""

import uuid
from typing import Any

from sqlalchemy.orm import Session

from vaxcat.db.models.audit_log import AuditLog


# Queue an audit row in the caller's transaction so it commits (or rolls back)
# together with the change it describes.
def record_audit(
    db: Session,
    actor: str | None,
    action: str,
    target_type: str,
    target_id: uuid.UUID,
    **meta: Any,
) -> AuditLog:
    entry = AuditLog(
        actor=actor or "system",
        action=action,
        target_type=target_type,
        target_id=target_id,
        meta=meta,
    )
    db.add(entry)
    return entry
