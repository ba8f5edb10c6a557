"""
Forward-only status machines for appraisals and cycles.
"""
from typing import Dict, Optional

from faculty_appraisal.core.exceptions import InvalidTransitionError
from faculty_appraisal.schemas.appraisal import Appraisal, AppraisalStatus, Cycle, CycleStatus

APPRAISAL_TRANSITIONS: Dict[AppraisalStatus, Optional[AppraisalStatus]] = {
    AppraisalStatus.NOT_STARTED: AppraisalStatus.SELF_ASSESSMENT,
    AppraisalStatus.SELF_ASSESSMENT: AppraisalStatus.SUBMITTED,
    AppraisalStatus.SUBMITTED: AppraisalStatus.REVIEWED,
    AppraisalStatus.REVIEWED: AppraisalStatus.COMPLETED,
    AppraisalStatus.COMPLETED: None,
}

CYCLE_TRANSITIONS: Dict[CycleStatus, Optional[CycleStatus]] = {
    CycleStatus.DRAFT: CycleStatus.ACTIVE,
    CycleStatus.ACTIVE: CycleStatus.COMPLETED,
    CycleStatus.COMPLETED: None,
}

# Every status must have an entry, terminal ones map to None
assert set(APPRAISAL_TRANSITIONS) == set(AppraisalStatus)
assert set(CYCLE_TRANSITIONS) == set(CycleStatus)


def require_status(appraisal: Appraisal, required: AppraisalStatus, action: str) -> None:
    if appraisal.status != required:
        raise InvalidTransitionError(
            f"Cannot {action}: appraisal is '{appraisal.status.value}', expected '{required.value}'",
            current_status=appraisal.status.value,
            required_status=required.value,
        )


def source_status_for(target: AppraisalStatus) -> Optional[AppraisalStatus]:
    for source, nxt in APPRAISAL_TRANSITIONS.items():
        if nxt == target:
            return source
    return None


def advance(appraisal: Appraisal, target: AppraisalStatus) -> Appraisal:
    """Move one step forward; anything else (skip, regression, terminal) is rejected."""
    if APPRAISAL_TRANSITIONS[appraisal.status] != target:
        required = source_status_for(target)
        raise InvalidTransitionError(
            f"Cannot move appraisal from '{appraisal.status.value}' to '{target.value}'",
            current_status=appraisal.status.value,
            required_status=required.value if required else None,
        )
    appraisal.status = target
    return appraisal


def advance_cycle(cycle: Cycle, target: CycleStatus) -> Cycle:
    if CYCLE_TRANSITIONS[cycle.status] != target:
        raise InvalidTransitionError(
            f"Cannot move cycle '{cycle.name}' from '{cycle.status.value}' to '{target.value}'",
            current_status=cycle.status.value,
        )
    cycle.status = target
    return cycle
