"""
Annual rollup of completed monthly appraisals.

``build_annual_rollup`` is pure: ids and timestamps are derived from the
inputs, so recomputing over the same monthly records yields identical
output and the upsert in ``RollupService`` is idempotent.
"""
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from faculty_appraisal.core.exceptions import AccessDeniedError, AppraisalValidationError
from faculty_appraisal.core.rounding import percentage, round_half_up
from faculty_appraisal.schemas.appraisal import (
    AIInsights,
    Appraisal,
    AppraisalStatus,
    AttendanceSummary,
    Cycle,
    CycleKind,
    CycleStatus,
)
from faculty_appraisal.schemas.identity import Identity
from faculty_appraisal.services.base import BaseService
from faculty_appraisal.services.insights import (
    DEFAULT_ATTENDANCE_PERCENTAGE,
    FILLER_IMPROVEMENT,
    FILLER_STRENGTH,
    FILLER_TRAINING,
    attendance_impact_for,
    with_fillers,
)
from faculty_appraisal.services.review import derive_category
from faculty_appraisal.services.store import APPRAISALS_KEY, CYCLES_KEY, Repository

ANNUAL_SUMMARY_TEMPLATE = (
    "Annual summary for {name} ({year}): {months} completed monthly appraisal(s) "
    "with an average score of {score:.1f}/10, rated {category}."
)
FILLERS = {FILLER_STRENGTH, FILLER_IMPROVEMENT, FILLER_TRAINING}


def annual_cycle_id(year: int, employee_id: str) -> str:
    return f"annual-{year}-{employee_id}"


def annual_appraisal_id(employee_id: str, year: int) -> str:
    return f"annual-{employee_id}-{year}"


def select_monthly(
    employee_id: str,
    year: int,
    appraisals: Iterable[Appraisal],
    cycles: Dict[str, Cycle],
) -> List[Tuple[Appraisal, Cycle]]:
    """Completed monthly appraisals of one employee in one year, in month order."""
    selected = []
    for appraisal in appraisals:
        cycle = cycles.get(appraisal.cycle_id)
        if (
            cycle is not None
            and appraisal.employee_id == employee_id
            and appraisal.status == AppraisalStatus.COMPLETED
            and cycle.kind == CycleKind.MONTHLY
            and cycle.year == year
        ):
            selected.append((appraisal, cycle))
    selected.sort(key=lambda pair: (pair[1].month_ordinal or 0, pair[1].start_date, pair[0].id))
    return selected


def sum_attendance(summaries: Sequence[AttendanceSummary]) -> Optional[AttendanceSummary]:
    if not summaries:
        return None
    total = sum(s.total_working_days for s in summaries)
    present = sum(s.present_days for s in summaries)
    return AttendanceSummary(
        total_working_days=total,
        present_days=present,
        absent_days=sum(s.absent_days for s in summaries),
        leave_days=sum(s.leave_days for s in summaries),
        late_count=sum(s.late_count for s in summaries),
        # Recomputed from the summed days, not averaged across months
        attendance_percentage=percentage(present, total),
    )


def _merged(lines_per_month: Iterable[List[str]]) -> List[str]:
    merged: List[str] = []
    for lines in lines_per_month:
        for line in lines:
            if line not in FILLERS and line not in merged:
                merged.append(line)
    return merged


def build_annual_rollup(
    employee_id: str,
    year: int,
    appraisals: Iterable[Appraisal],
    cycles: Dict[str, Cycle],
) -> Tuple[Cycle, Appraisal]:
    selected = select_monthly(employee_id, year, appraisals, cycles)
    if not selected:
        raise AppraisalValidationError(
            f"No completed monthly appraisals for employee {employee_id} in {year}",
            details={"employee_id": employee_id, "year": year},
        )

    monthly = [a for a, _ in selected]
    mean = sum(a.final_score for a in monthly) / len(monthly)
    final_score = round_half_up(mean, 1)
    category = derive_category(mean)
    attendance = sum_attendance([a.attendance_summary for a in monthly if a.attendance_summary is not None])

    latest, latest_cycle = selected[-1]
    completed = [a.completed_at for a in monthly if a.completed_at is not None]
    stamp = max(completed) if completed else None

    insights = [a.ai_insights for a in monthly if a.ai_insights is not None]
    strengths, improvements, training = with_fillers(
        _merged(i.strengths for i in insights),
        _merged(i.areas_for_improvement for i in insights),
        _merged(i.training_suggestions for i in insights),
    )
    rate = attendance.attendance_percentage if attendance is not None else DEFAULT_ATTENDANCE_PERCENTAGE

    cycle = Cycle(
        id=annual_cycle_id(year, employee_id),
        name=f"Annual Summary {year}",
        start_date=date(year, 1, 1),
        end_date=date(year, 12, 31),
        kind=CycleKind.ANNUAL,
        year=year,
        status=CycleStatus.COMPLETED,
        criteria=[c.model_copy() for c in latest_cycle.criteria],
        created_by="System",
        created_at=stamp,
        employee_id=employee_id,
    )
    annual = Appraisal(
        id=annual_appraisal_id(employee_id, year),
        cycle_id=cycle.id,
        cycle_name=cycle.name,
        employee_id=employee_id,
        employee_name=latest.employee_name,
        department=latest.department,
        # Created directly in its terminal state, never self-assessed or reviewed
        status=AppraisalStatus.COMPLETED,
        created_at=stamp,
        completed_at=stamp,
        final_score=final_score,
        performance_category=category,
        final_recommendations="",
        attendance_summary=attendance,
        ai_insights=AIInsights(
            overall_summary=ANNUAL_SUMMARY_TEMPLATE.format(
                name=latest.employee_name or employee_id,
                year=year,
                months=len(monthly),
                score=final_score,
                category=category.value,
            ),
            strengths=strengths,
            areas_for_improvement=improvements,
            training_suggestions=training,
            attendance_impact=attendance_impact_for(rate),
            generated_at=stamp,
        ),
        source_appraisal_ids=[a.id for a in monthly],
    )
    return cycle, annual


class RollupService(BaseService):
    def __init__(self, store, audit=None, clock=None):
        super().__init__(store, audit, clock)
        self.appraisals = Repository(store, APPRAISALS_KEY, Appraisal)
        self.cycles = Repository(store, CYCLES_KEY, Cycle)

    def run(self, actor: Identity, employee_id: str, year: int) -> Appraisal:
        if not actor.is_admin:
            raise AccessDeniedError("Only administrators may generate annual summaries")

        cycle, annual = build_annual_rollup(employee_id, year, self.appraisals.all(), self.cycles.index())
        self.cycles.save(cycle)
        self.appraisals.save(annual)

        self.log_info(f"Annual rollup {annual.id} built from {len(annual.source_appraisal_ids)} month(s)")
        self.audit.log_action(
            "Rolled Up",
            actor,
            f"Generated annual summary {year} for {annual.employee_name or employee_id} - {annual.performance_category.value}",
            annual.id,
        )
        return annual

    def run_for_year(self, actor: Identity, year: int) -> List[Appraisal]:
        """Roll up every employee with at least one completed month in the year."""
        cycles = self.cycles.index()
        employees = sorted({
            a.employee_id for a in self.appraisals.all()
            if a.status == AppraisalStatus.COMPLETED
            and a.cycle_id in cycles
            and cycles[a.cycle_id].kind == CycleKind.MONTHLY
            and cycles[a.cycle_id].year == year
        })
        return [self.run(actor, employee_id, year) for employee_id in employees]
