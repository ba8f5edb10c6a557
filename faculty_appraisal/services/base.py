import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from faculty_appraisal.services.audit import AuditSink, NullAuditSink
from faculty_appraisal.services.store import CollectionStore

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BaseService:
    """
    Shared plumbing for the workflow services: the collection store,
    the audit sink, a clock and a per-class logger.
    """

    def __init__(
        self,
        store: CollectionStore,
        audit: Optional[AuditSink] = None,
        clock: Optional[Clock] = None,
    ):
        self.store = store
        self.audit = audit or NullAuditSink()
        self.clock = clock or utc_now
        self._logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")

    def log_info(self, message: str, **extra):
        self._logger.info(message, extra=extra or None)

    def log_warning(self, message: str, **extra):
        self._logger.warning(message, extra=extra or None)
