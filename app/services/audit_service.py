"""
Audit service — records all department changes and queries audit logs.

Every CREATE, UPDATE, MOVE and DELETE performed by the hierarchy
service passes through ``log_change`` before the surrounding
transaction commits, so the audit row and the change share one fate.
"""

import json
import logging
from typing import Any

from flask import has_request_context, request
from sqlalchemy import desc

from app.extensions import db
from app.models.audit import AuditLog

logger = logging.getLogger(__name__)

# Entity name used for every department audit entry.
DEPARTMENT_ENTITY = "org.department"


# -- Write audit entries ---------------------------------------------------


def log_change(
    user_id: int | None,
    action_type: str,
    entity_type: str,
    entity_id: int | None,
    previous_value: dict[str, Any] | None = None,
    new_value: dict[str, Any] | None = None,
) -> AuditLog:
    """
    Record a data change in the audit log (flushes, does not commit).

    Args:
        user_id:        ID of the actor, or None for system actions
                        (e.g., a CLI rebuild).
        action_type:    One of CREATE, UPDATE, MOVE, DELETE, ENABLE,
                        DISABLE, REORDER, REBUILD.
        entity_type:    Dot-notation entity name (e.g., 'org.department').
        entity_id:      Primary key of the affected record.
        previous_value: Dict of the record state before the change.
        new_value:      Dict of the record state after the change.

    Returns:
        The newly created AuditLog record.
    """
    # Capture request metadata when available (inside a request context).
    ip_address = None
    user_agent = None
    if has_request_context():
        ip_address = request.remote_addr
        user_agent = str(request.user_agent)[:500]

    entry = AuditLog(
        user_id=user_id,
        action_type=action_type,
        entity_type=entity_type,
        entity_id=entity_id,
        previous_value=json.dumps(previous_value, default=str)
        if previous_value
        else None,
        new_value=json.dumps(new_value, default=str) if new_value else None,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.session.add(entry)
    db.session.flush()

    logger.debug(
        "Audit: %s %s:%s by user %s",
        action_type,
        entity_type,
        entity_id,
        user_id,
    )
    return entry


# -- Query audit logs ------------------------------------------------------


def get_audit_logs(
    entity_id: int | None = None,
    action_type: str | None = None,
    entity_type: str | None = DEPARTMENT_ENTITY,
    limit: int = 50,
) -> list[AuditLog]:
    """
    Return the most recent audit entries, newest first.

    Args:
        entity_id:   Filter to a single record.
        action_type: Filter by action (CREATE, MOVE, etc.).
        entity_type: Filter by entity; defaults to departments.
        limit:       Maximum number of rows.
    """
    query = AuditLog.query.order_by(desc(AuditLog.created_at), desc(AuditLog.id))

    if entity_id is not None:
        query = query.filter(AuditLog.entity_id == entity_id)
    if action_type:
        query = query.filter(AuditLog.action_type == action_type)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)

    return query.limit(limit).all()
