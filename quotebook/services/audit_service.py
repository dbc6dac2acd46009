"""Activity log service."""
import logging

from flask import has_request_context, request

from quotebook import db
from quotebook.models import AuditLog

logger = logging.getLogger(__name__)


class AuditService:
    @staticmethod
    def log(action, entity_type=None, entity_id=None, details=None, user_id=None, commit=True):
        entry = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            ip_address=request.remote_addr if has_request_context() else None,
        )
        db.session.add(entry)
        if commit:
            db.session.commit()
        logger.debug('audit %s %s %s', action, entity_type, entity_id)
        return entry

    @staticmethod
    def recent(limit=50, user_id=None):
        query = AuditLog.query
        if user_id:
            query = query.filter(AuditLog.user_id == user_id)
        return query.order_by(AuditLog.created_at.desc()).limit(limit).all()
