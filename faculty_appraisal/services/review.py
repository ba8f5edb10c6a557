"""
Review reconciliation: merging self scores with reviewer overrides and
computing the finalization defaults.
"""
from typing import Dict, List, Sequence

from faculty_appraisal.core.exceptions import AppraisalValidationError
from faculty_appraisal.core.rounding import round_half_up
from faculty_appraisal.schemas.appraisal import Appraisal, PerformanceCategory, ReviewerAssessment
from faculty_appraisal.schemas.workflow import FinalizationDefaults, ReviewerScoreInput
from faculty_appraisal.services.attendance_scorer import calculate_attendance_score
from faculty_appraisal.services.insights import average_reviewer_score

EXCELLENT_THRESHOLD = 8
GOOD_THRESHOLD = 6


def derive_category(score: float) -> PerformanceCategory:
    if score >= EXCELLENT_THRESHOLD:
        return PerformanceCategory.EXCELLENT
    if score >= GOOD_THRESHOLD:
        return PerformanceCategory.GOOD
    return PerformanceCategory.NEEDS_IMPROVEMENT


def seed_reviewer_assessments(appraisal: Appraisal, attendance_criterion_id: str) -> List[ReviewerAssessment]:
    """
    Working copy for a reviewer: one row per self-assessed criterion, scored
    at the self score, except attendance which starts from the system suggestion.
    """
    rows = []
    for sa in appraisal.self_assessments:
        is_attendance = sa.criterion_id == attendance_criterion_id
        suggested = (
            calculate_attendance_score(appraisal.attendance_summary) if is_attendance else sa.score
        )
        rows.append(ReviewerAssessment(
            criterion_id=sa.criterion_id,
            criterion_name=sa.criterion_name,
            self_score=sa.score,
            reviewer_score=suggested,
            suggested_score=suggested,
            is_attendance_auto_suggested=is_attendance,
            attendance_adjusted=False,
        ))
    return rows


def _index_inputs(inputs: Sequence[ReviewerScoreInput], expected: Sequence[str]) -> Dict[str, ReviewerScoreInput]:
    by_id: Dict[str, ReviewerScoreInput] = {}
    for item in inputs:
        if item.criterion_id in by_id:
            raise AppraisalValidationError(
                f"Criterion '{item.criterion_id}' was scored more than once",
                details={"criterion_id": item.criterion_id},
            )
        by_id[item.criterion_id] = item

    unknown = sorted(set(by_id) - set(expected))
    missing = [c for c in expected if c not in by_id]
    if unknown or missing:
        raise AppraisalValidationError(
            "Reviewer scores must cover exactly the self-assessed criteria",
            details={"missing": missing, "unknown": unknown},
        )
    return by_id


def reconcile_review(
    appraisal: Appraisal,
    inputs: Sequence[ReviewerScoreInput],
    attendance_criterion_id: str,
) -> List[ReviewerAssessment]:
    """
    Apply reviewer scores on top of the seeded rows.

    An attendance score that moved off its suggestion must be flagged as
    adjusted and carry a non-empty comment; otherwise the review is rejected.
    """
    seeded = seed_reviewer_assessments(appraisal, attendance_criterion_id)
    if not seeded:
        raise AppraisalValidationError("Appraisal has no self-assessed criteria to review")

    by_id = _index_inputs(inputs, [row.criterion_id for row in seeded])

    result = []
    for row in seeded:
        item = by_id[row.criterion_id]
        row.reviewer_score = item.reviewer_score
        row.reviewer_comments = item.reviewer_comments

        if row.is_attendance_auto_suggested:
            adjusted = item.reviewer_score != row.suggested_score
            if adjusted:
                if item.attendance_adjusted is False:
                    raise AppraisalValidationError(
                        f"Attendance score differs from the suggested value ({row.suggested_score:g}) "
                        "but is not flagged as adjusted",
                        details={"criterion_id": row.criterion_id},
                    )
                if not item.reviewer_comments.strip():
                    raise AppraisalValidationError(
                        "Comment required for adjusted attendance score",
                        details={
                            "criterion_id": row.criterion_id,
                            "suggested_score": row.suggested_score,
                            "reviewer_score": item.reviewer_score,
                        },
                    )
            row.attendance_adjusted = adjusted
        result.append(row)
    return result


def finalization_defaults(appraisal: Appraisal) -> FinalizationDefaults:
    if not appraisal.reviewer_assessments:
        raise AppraisalValidationError("Appraisal has no reviewer assessments to finalize")
    average = average_reviewer_score(appraisal.reviewer_assessments)
    return FinalizationDefaults(
        final_score=round_half_up(average, 1),
        performance_category=derive_category(average),
        average_score=average,
    )
