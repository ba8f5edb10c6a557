from collections import defaultdict
from typing import Iterable, Optional

from faculty_appraisal.core.exceptions import AccessDeniedError
from faculty_appraisal.core.rounding import round_half_up
from faculty_appraisal.schemas.appraisal import Appraisal, AppraisalStatus, PerformanceCategory
from faculty_appraisal.schemas.identity import Identity
from faculty_appraisal.schemas.workflow import AppraisalSummaryReport, AttendanceRow
from faculty_appraisal.services.base import BaseService
from faculty_appraisal.services.store import APPRAISALS_KEY, Repository


def _mean(values) -> float:
    values = list(values)
    return round_half_up(sum(values) / len(values), 1) if values else 0.0


def summarize_appraisals(
    appraisals: Iterable[Appraisal],
    cycle_id: Optional[str] = None,
    category: Optional[PerformanceCategory] = None,
    department: Optional[str] = None,
) -> AppraisalSummaryReport:
    """
    Statistics over completed appraisals matching the filters. Annual
    summaries are only counted when their own cycle is requested.
    """
    completed = [
        a for a in appraisals
        if a.status == AppraisalStatus.COMPLETED
        and (a.cycle_id == cycle_id if cycle_id is not None else not a.source_appraisal_ids)
        and (category is None or a.performance_category == category)
        and (department is None or a.department == department)
    ]

    counts = {c.value: 0 for c in PerformanceCategory}
    by_department = defaultdict(list)
    for a in completed:
        if a.performance_category is not None:
            counts[a.performance_category.value] += 1
        by_department[a.department].append(a.final_score or 0)

    return AppraisalSummaryReport(
        completed_count=len(completed),
        category_counts=counts,
        average_score=_mean(a.final_score or 0 for a in completed),
        department_averages={d: _mean(scores) for d, scores in sorted(by_department.items())},
        attendance=[
            AttendanceRow(
                employee_id=a.employee_id,
                employee_name=a.employee_name,
                cycle_name=a.cycle_name,
                attendance_percentage=a.attendance_summary.attendance_percentage if a.attendance_summary else None,
                final_score=a.final_score,
            )
            for a in completed
        ],
    )


class ReportService(BaseService):
    def __init__(self, store, audit=None, clock=None):
        super().__init__(store, audit, clock)
        self.appraisals = Repository(store, APPRAISALS_KEY, Appraisal)

    def summary(
        self,
        actor: Identity,
        cycle_id: Optional[str] = None,
        category: Optional[PerformanceCategory] = None,
        department: Optional[str] = None,
    ) -> AppraisalSummaryReport:
        if not actor.is_admin:
            raise AccessDeniedError("Only administrators may view appraisal reports")
        return summarize_appraisals(self.appraisals.all(), cycle_id, category, department)
