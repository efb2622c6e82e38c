"""
Audit event recorder

Writes Event rows for user-visible actions. Recording is fire-and-forget:
a failed write is rolled back and logged, and the action that triggered
it still stands.
"""

from sqlalchemy.exc import SQLAlchemyError

from hackerspace import db
from hackerspace.data.core.event_info.event import Event
from hackerspace.logger import get_logger

logger = get_logger("hackerspace.audit")


class EventAuditRecorder:

    def record(self, domain, key, account_id=None, **payload):
        try:
            Event.add_event(domain, key, account_id=account_id, **payload)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to record audit event {domain}/{key}: {e}", exc_info=True)
            return
        logger.debug(f"Audit event {domain}/{key} recorded for account {account_id}")
