"""
Criterion & Cycle Registry.

Cycles are authored by admins. A cycle's criteria weights must total
exactly 100 whenever the cycle is created, edited or activated. Only
``Active`` monthly cycles accept new appraisals.
"""
import uuid
from typing import List, Optional

from faculty_appraisal.core.exceptions import (
    AccessDeniedError,
    AppraisalValidationError,
    InvalidTransitionError,
    NotFoundError,
)
from faculty_appraisal.schemas.appraisal import Appraisal, Criterion, Cycle, CycleKind, CycleStatus
from faculty_appraisal.schemas.identity import Identity
from faculty_appraisal.schemas.workflow import CycleCreate, CycleUpdate
from faculty_appraisal.services.audit import CYCLE_MODULE
from faculty_appraisal.services.base import BaseService
from faculty_appraisal.services.seeds import default_criteria
from faculty_appraisal.services.store import APPRAISALS_KEY, CYCLES_KEY, Repository
from faculty_appraisal.services.workflow import advance_cycle

REQUIRED_TOTAL_WEIGHT = 100


def validate_criteria(criteria: List[Criterion]) -> None:
    if not criteria:
        raise AppraisalValidationError("A cycle needs at least one evaluation criterion")

    seen = set()
    for c in criteria:
        if c.id in seen:
            raise AppraisalValidationError(
                f"Duplicate criterion id '{c.id}'", details={"criterion_id": c.id}
            )
        seen.add(c.id)

    total = sum(c.weight for c in criteria)
    if total != REQUIRED_TOTAL_WEIGHT:
        raise AppraisalValidationError(
            f"Total weightage must equal 100% (got {total}%)",
            details={"total_weight": total},
        )


def validate_period(cycle: Cycle) -> None:
    if cycle.start_date > cycle.end_date:
        raise AppraisalValidationError(
            "Cycle start date must not be after its end date",
            details={"start_date": cycle.start_date.isoformat(), "end_date": cycle.end_date.isoformat()},
        )


class CycleService(BaseService):
    def __init__(self, store, audit=None, clock=None):
        super().__init__(store, audit, clock)
        self.cycles = Repository(store, CYCLES_KEY, Cycle)
        self.appraisals = Repository(store, APPRAISALS_KEY, Appraisal)

    # --- Reads ---
    def list_cycles(self, kind: Optional[CycleKind] = None, status: Optional[CycleStatus] = None) -> List[Cycle]:
        cycles = self.cycles.all()
        if kind:
            cycles = [c for c in cycles if c.kind == kind]
        if status:
            cycles = [c for c in cycles if c.status == status]
        return cycles

    def get_cycle(self, cycle_id: str) -> Cycle:
        cycle = self.cycles.get(cycle_id)
        if cycle is None:
            raise NotFoundError("Cycle", cycle_id)
        return cycle

    def available_cycles(self, employee_id: str) -> List[Cycle]:
        """Active monthly cycles the employee has not started an appraisal for."""
        started = {a.cycle_id for a in self.appraisals.all() if a.employee_id == employee_id}
        return [
            c for c in self.list_cycles(kind=CycleKind.MONTHLY, status=CycleStatus.ACTIVE)
            if c.id not in started
        ]

    # --- Authoring ---
    def _require_admin(self, actor: Identity, action: str) -> None:
        if not actor.is_admin:
            self.log_warning(f"Denied cycle {action} for {actor.id}")
            raise AccessDeniedError(f"Only administrators may {action} appraisal cycles")

    def create_cycle(self, actor: Identity, data: CycleCreate) -> Cycle:
        self._require_admin(actor, "create")
        if data.status == CycleStatus.COMPLETED:
            raise AppraisalValidationError("A new cycle must start as Draft or Active")

        criteria = data.criteria if data.criteria is not None else default_criteria()
        cycle = Cycle(
            id=uuid.uuid4().hex,
            name=data.name,
            start_date=data.start_date,
            end_date=data.end_date,
            kind=CycleKind.MONTHLY,
            month_ordinal=data.month_ordinal or data.start_date.month,
            year=data.year or data.start_date.year,
            status=data.status,
            criteria=criteria,
            created_by=actor.name,
            created_at=self.clock(),
        )
        validate_criteria(cycle.criteria)
        validate_period(cycle)

        self.cycles.save(cycle)
        self.log_info(f"Cycle {cycle.id} created ({cycle.status.value})", cycle_id=cycle.id)
        self.audit.log_action("Created", actor, f"Created new cycle: {cycle.name}", cycle.id, module=CYCLE_MODULE)
        return cycle

    def update_cycle(self, actor: Identity, cycle_id: str, data: CycleUpdate) -> Cycle:
        self._require_admin(actor, "update")
        cycle = self.get_cycle(cycle_id)
        if cycle.kind == CycleKind.ANNUAL:
            raise AppraisalValidationError("Annual summary cycles are system-generated and cannot be edited")
        if cycle.status == CycleStatus.COMPLETED:
            raise InvalidTransitionError(
                f"Cycle '{cycle.name}' is completed and can no longer be edited",
                current_status=cycle.status.value,
            )

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "criteria" in changes:
            if cycle.status != CycleStatus.DRAFT:
                raise InvalidTransitionError(
                    "Criteria can only be changed while the cycle is a Draft",
                    current_status=cycle.status.value,
                    required_status=CycleStatus.DRAFT.value,
                )
            cycle.criteria = data.criteria
        for field in ("name", "start_date", "end_date", "month_ordinal", "year"):
            if field in changes:
                setattr(cycle, field, getattr(data, field))

        validate_criteria(cycle.criteria)
        validate_period(cycle)

        self.cycles.save(cycle)
        self.audit.log_action("Updated", actor, f"Updated cycle: {cycle.name}", cycle.id, module=CYCLE_MODULE)
        return cycle

    def activate_cycle(self, actor: Identity, cycle_id: str) -> Cycle:
        self._require_admin(actor, "activate")
        cycle = self.get_cycle(cycle_id)
        validate_criteria(cycle.criteria)
        advance_cycle(cycle, CycleStatus.ACTIVE)
        self.cycles.save(cycle)
        self.log_info(f"Cycle {cycle.id} activated", cycle_id=cycle.id)
        self.audit.log_action("Activated", actor, f"Activated cycle: {cycle.name}", cycle.id, module=CYCLE_MODULE)
        return cycle

    def complete_cycle(self, actor: Identity, cycle_id: str) -> Cycle:
        self._require_admin(actor, "complete")
        cycle = self.get_cycle(cycle_id)
        advance_cycle(cycle, CycleStatus.COMPLETED)
        self.cycles.save(cycle)
        self.audit.log_action("Completed", actor, f"Completed cycle: {cycle.name}", cycle.id, module=CYCLE_MODULE)
        return cycle

    def delete_cycle(self, actor: Identity, cycle_id: str) -> None:
        self._require_admin(actor, "delete")
        cycle = self.get_cycle(cycle_id)
        in_use = [a.id for a in self.appraisals.all() if a.cycle_id == cycle_id]
        if in_use:
            raise AppraisalValidationError(
                f"Cycle '{cycle.name}' has {len(in_use)} appraisal(s) and cannot be deleted",
                details={"appraisal_ids": in_use},
            )
        self.cycles.delete(cycle_id)
        self.audit.log_action("Deleted", actor, f"Removed appraisal cycle: {cycle.name}", cycle.id, module=CYCLE_MODULE)
