"""
Identity and service dependencies.

Authentication happens upstream (gateway / SSO). By the time a request
reaches this service the identity provider has resolved the acting
employee and forwards it in headers; this module only reads them.
"""
import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from faculty_appraisal.core.exceptions import AuthenticationError
from faculty_appraisal.database import get_db
from faculty_appraisal.schemas.identity import Identity, Role
from faculty_appraisal.services.appraisal_service import AppraisalService
from faculty_appraisal.services.audit import AuditService
from faculty_appraisal.services.cycle_service import CycleService
from faculty_appraisal.services.reports import ReportService
from faculty_appraisal.services.rollup import RollupService
from faculty_appraisal.services.seeds import default_seeds
from faculty_appraisal.services.store import SqlCollectionStore

logger = logging.getLogger(__name__)


def get_current_identity(
    x_employee_id: Optional[str] = Header(None),
    x_employee_name: Optional[str] = Header(None),
    x_employee_department: Optional[str] = Header(None),
    x_employee_role: Optional[str] = Header(None),
) -> Identity:
    if not x_employee_id:
        logger.warning("Identity resolution failed: missing X-Employee-Id")
        raise AuthenticationError("Missing X-Employee-Id header")
    try:
        role = Role(x_employee_role) if x_employee_role else Role.FACULTY
    except ValueError:
        logger.warning(f"Identity resolution failed: unknown role {x_employee_role!r}")
        raise AuthenticationError(f"Unknown role '{x_employee_role}'")
    return Identity(
        id=x_employee_id,
        name=x_employee_name or x_employee_id,
        department=x_employee_department or "",
        role=role,
    )


def get_store(db: Session = Depends(get_db)) -> SqlCollectionStore:
    return SqlCollectionStore(db, seeds=default_seeds())


def get_audit(db: Session = Depends(get_db)) -> AuditService:
    return AuditService(db)


def get_cycle_service(
    store: SqlCollectionStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
) -> CycleService:
    return CycleService(store, audit)


def get_appraisal_service(
    store: SqlCollectionStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
) -> AppraisalService:
    return AppraisalService(store, audit)


def get_rollup_service(
    store: SqlCollectionStore = Depends(get_store),
    audit: AuditService = Depends(get_audit),
) -> RollupService:
    return RollupService(store, audit)


def get_report_service(store: SqlCollectionStore = Depends(get_store)) -> ReportService:
    return ReportService(store)
