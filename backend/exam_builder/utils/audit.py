from flask import has_request_context
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from exam_builder.extensions import db
from exam_builder.models.audit_log import AuditLog
from typing import Optional

def current_actor_id() -> Optional[str]:
    """Identity of the caller, or None outside an authenticated request."""
    if not has_request_context():
        return None  # scripts, autosave timers
    verify_jwt_in_request(optional=True)
    return get_jwt_identity()

def log_action(
    *,
    action: str,
    entity_type: str,
    entity_id: Optional[str],
    payload: dict | None = None,
    actor_id: Optional[str] = None
):
    log = AuditLog()

    log.actor_id = actor_id or current_actor_id()
    log.action = action
    log.entity_type = entity_type
    log.entity_id = entity_id
    log.payload = payload or {}

    db.session.add(log)
