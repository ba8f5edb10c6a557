from datetime import datetime, timezone

import pytest

from faculty_appraisal.schemas.appraisal import AttendanceSummary, ReviewerAssessment
from faculty_appraisal.services import insights
from faculty_appraisal.services.insights import generate_insights


def _row(name, score):
    return ReviewerAssessment(
        criterion_id=name.lower().split()[0],
        criterion_name=name,
        self_score=score,
        reviewer_score=score,
    )


def _attendance(pct):
    return AttendanceSummary(total_working_days=22, present_days=20, attendance_percentage=pct)


@pytest.mark.parametrize("scores,template", [
    ((9, 8, 8), insights.SUMMARY_EXCEPTIONAL),
    ((8, 6, 6), insights.SUMMARY_GOOD),
    ((5, 6, 6), insights.SUMMARY_ATTENTION),
    ((), insights.SUMMARY_ATTENTION),
])
def test_summary_tier_follows_average(scores, template):
    rows = [_row(f"Criterion {i}", s) for i, s in enumerate(scores)]
    result = generate_insights("Dr. Khan", rows, _attendance(90))
    assert result.overall_summary == template.format(name="Dr. Khan")


@pytest.mark.parametrize("pct,impact", [
    (95, insights.IMPACT_OUTSTANDING),
    (100, insights.IMPACT_OUTSTANDING),
    (94, insights.IMPACT_NEUTRAL),
    (80, insights.IMPACT_NEUTRAL),
    (79, insights.IMPACT_NEGATIVE),
])
def test_attendance_impact(pct, impact):
    assert generate_insights("X", [_row("Teaching Performance", 7)], _attendance(pct)).attendance_impact == impact


def test_strengths_and_improvements_per_criterion():
    rows = [
        _row("Teaching Performance", 4),
        _row("Research & Publications", 5),
        _row("Administrative Contribution", 9),
        _row("Student Feedback", 7),
    ]
    result = generate_insights("Dr. Khan", rows, _attendance(70))

    assert result.strengths == ["Strong performance in Administrative Contribution"]
    assert result.areas_for_improvement == [
        "Enhancement needed in Teaching Performance",
        "Enhancement needed in Research & Publications",
        insights.ATTENDANCE_IMPROVEMENT,
    ]
    assert result.training_suggestions == [
        "Pedagogy enhancement program suggested",
        "Research methodology workshop recommended",
        insights.ATTENDANCE_TRAINING,
    ]


def test_fillers_when_nothing_stands_out():
    result = generate_insights("Dr. Khan", [_row("Student Feedback", 7)], _attendance(90))
    assert result.strengths == [insights.FILLER_STRENGTH]
    assert result.areas_for_improvement == [insights.FILLER_IMPROVEMENT]
    assert result.training_suggestions == [insights.FILLER_TRAINING]


def test_outstanding_attendance_is_a_strength():
    result = generate_insights("Dr. Khan", [_row("Student Feedback", 7)], _attendance(96))
    assert result.strengths == [insights.ATTENDANCE_STRENGTH]


def test_missing_attendance_treated_as_neutral():
    result = generate_insights("Dr. Khan", [_row("Student Feedback", 7)], None)
    assert result.attendance_impact == insights.IMPACT_NEUTRAL


def test_deterministic_output():
    stamp = datetime(2025, 2, 1, tzinfo=timezone.utc)
    rows = [_row("Teaching Performance", 8), _row("Attendance", 3)]
    first = generate_insights("Dr. Khan", rows, _attendance(88), generated_at=stamp)
    second = generate_insights("Dr. Khan", rows, _attendance(88), generated_at=stamp)
    assert first.model_dump_json() == second.model_dump_json()
