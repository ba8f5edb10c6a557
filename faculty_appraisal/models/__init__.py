# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import stored_collection, audit_log

# Explicit class exports for cleaner imports
from .stored_collection import StoredCollection
from .audit_log import AuditLog

__all__ = [
    "StoredCollection",
    "AuditLog",
]
