import pytest

from faculty_appraisal.core.exceptions import AccessDeniedError, AppraisalValidationError
from faculty_appraisal.schemas.appraisal import (
    AppraisalStatus,
    AttendanceSummary,
    CycleKind,
    PerformanceCategory,
)
from faculty_appraisal.schemas.workflow import FinalizeInput, ReviewerScoreInput
from faculty_appraisal.services.rollup import annual_appraisal_id, annual_cycle_id, sum_attendance


@pytest.fixture
def complete_month(make_cycle, appraisal_service, admin):
    """Take one employee through a whole month and return the completed record."""
    def _complete_month(employee, month, score, year=2025):
        cycle = make_cycle(year=year, month=month)
        appraisal = appraisal_service.create(employee, cycle.id)
        appraisal_service.submit(employee, appraisal.id)
        rows = appraisal_service.start_review(admin, appraisal.id)
        appraisal_service.submit_review(admin, appraisal.id, [
            ReviewerScoreInput(criterion_id=r.criterion_id, reviewer_score=r.reviewer_score) for r in rows
        ])
        return appraisal_service.finalize(admin, appraisal.id, FinalizeInput(final_score=score))
    return _complete_month


def test_sum_attendance_recomputes_percentage():
    months = [
        AttendanceSummary(total_working_days=22, present_days=22, late_count=1, attendance_percentage=100),
        AttendanceSummary(total_working_days=20, present_days=15, absent_days=5, late_count=2, attendance_percentage=75),
    ]
    total = sum_attendance(months)
    assert total.total_working_days == 42
    assert total.present_days == 37
    assert total.absent_days == 5
    assert total.late_count == 3
    # 37/42 = 88.1%, not the 87.5% mean of the monthly percentages
    assert total.attendance_percentage == 88


def test_sum_attendance_of_nothing():
    assert sum_attendance([]) is None


def test_rollup_averages_completed_months(complete_month, rollup_service, admin, faculty):
    jan = complete_month(faculty, 1, 9.0)
    feb = complete_month(faculty, 2, 7.0)
    mar = complete_month(faculty, 3, 8.5)

    annual = rollup_service.run(admin, faculty.id, 2025)

    assert annual.id == annual_appraisal_id(faculty.id, 2025)
    assert annual.cycle_id == annual_cycle_id(2025, faculty.id)
    assert annual.status == AppraisalStatus.COMPLETED
    assert annual.final_score == 8.2
    assert annual.performance_category == PerformanceCategory.EXCELLENT
    assert annual.source_appraisal_ids == [jan.id, feb.id, mar.id]
    assert annual.attendance_summary.total_working_days == 66
    assert annual.attendance_summary.present_days == 63
    assert annual.attendance_summary.attendance_percentage == 95
    assert annual.completed_at == mar.completed_at

    cycle = rollup_service.cycles.get(annual.cycle_id)
    assert cycle.kind == CycleKind.ANNUAL
    assert cycle.employee_id == faculty.id


def test_rollup_ignores_incomplete_and_other_years(
    complete_month, make_cycle, appraisal_service, rollup_service, admin, faculty, other_faculty
):
    kept = complete_month(faculty, 1, 6.0)
    complete_month(faculty, 12, 10.0, year=2024)
    complete_month(other_faculty, 2, 3.0)
    open_cycle = make_cycle(month=3)
    appraisal_service.create(faculty, open_cycle.id)

    annual = rollup_service.run(admin, faculty.id, 2025)
    assert annual.source_appraisal_ids == [kept.id]
    assert annual.final_score == 6.0
    assert annual.performance_category == PerformanceCategory.GOOD


def test_rollup_is_idempotent(complete_month, rollup_service, admin, faculty):
    complete_month(faculty, 1, 7.0)
    complete_month(faculty, 2, 8.0)

    first = rollup_service.run(admin, faculty.id, 2025)
    second = rollup_service.run(admin, faculty.id, 2025)

    assert first.model_dump_json() == second.model_dump_json()
    annual_records = [a for a in rollup_service.appraisals.all() if a.id == first.id]
    assert len(annual_records) == 1
    annual_cycles = rollup_service.cycles.index()
    assert list(annual_cycles).count(first.cycle_id) == 1


def test_rollup_updates_when_a_new_month_completes(complete_month, rollup_service, admin, faculty):
    complete_month(faculty, 1, 6.0)
    before = rollup_service.run(admin, faculty.id, 2025)
    complete_month(faculty, 2, 9.0)
    after = rollup_service.run(admin, faculty.id, 2025)

    assert before.id == after.id
    assert after.final_score == 7.5
    assert len(after.source_appraisal_ids) == 2


def test_rollup_without_completed_months(rollup_service, admin, faculty):
    with pytest.raises(AppraisalValidationError):
        rollup_service.run(admin, faculty.id, 2025)


def test_rollup_requires_admin(complete_month, rollup_service, faculty):
    complete_month(faculty, 1, 8.0)
    with pytest.raises(AccessDeniedError):
        rollup_service.run(faculty, faculty.id, 2025)


def test_run_for_year_covers_every_employee(complete_month, rollup_service, admin, faculty, other_faculty):
    complete_month(faculty, 1, 8.0)
    complete_month(other_faculty, 2, 5.0)

    results = rollup_service.run_for_year(admin, 2025)
    assert [a.employee_id for a in results] == sorted([faculty.id, other_faculty.id])
    # The annual records themselves are never picked up as months
    assert len(rollup_service.run_for_year(admin, 2025)) == 2
