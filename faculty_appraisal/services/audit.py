import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from sqlalchemy.orm import Session

from faculty_appraisal.models.audit_log import AuditLog
from faculty_appraisal.schemas.identity import Identity

logger = logging.getLogger(__name__)

APPRAISAL_MODULE = "Appraisal"
CYCLE_MODULE = "Appraisal Cycle"


class AuditSink(Protocol):
    def log_action(
        self,
        action: str,
        actor: Identity,
        details: str,
        entity_id: Optional[str] = None,
        module: str = APPRAISAL_MODULE,
    ) -> None: ...


class NullAuditSink:
    def log_action(self, action, actor, details, entity_id=None, module=APPRAISAL_MODULE):
        return None


@dataclass
class AuditEvent:
    action: str
    module: str
    actor_name: str
    details: str
    entity_id: Optional[str] = None


class InMemoryAuditSink:
    """Collects events in order; used by tests and scripts."""

    def __init__(self):
        self.events: List[AuditEvent] = []

    def log_action(self, action, actor, details, entity_id=None, module=APPRAISAL_MODULE):
        self.events.append(AuditEvent(action, module, actor.name, details, entity_id))


class AuditService:
    def __init__(self, db: Session):
        self.db = db

    def log_action(
        self,
        action: str,
        actor: Identity,
        details: str,
        entity_id: Optional[str] = None,
        module: str = APPRAISAL_MODULE,
    ) -> Optional[AuditLog]:
        """
        Append one audit entry. Strictly append-only.
        Fire-and-forget: a failure here is logged and never reaches the caller,
        the transition it describes has already been persisted.
        """
        try:
            db_log = AuditLog(
                action=action,
                module=module,
                actor_id=actor.id,
                actor_name=actor.name,
                entity_id=entity_id,
                details=details,
            )
            self.db.add(db_log)
            self.db.commit()
            return db_log
        except Exception as e:
            self.db.rollback()
            logger.error(f"FAILED TO AUDIT LOG: {e}", exc_info=True)
            return None

    def recent(self, limit: int = 50, module: Optional[str] = None) -> List[AuditLog]:
        query = self.db.query(AuditLog)
        if module:
            query = query.filter(AuditLog.module == module)
        return query.order_by(AuditLog.id.desc()).limit(limit).all()
