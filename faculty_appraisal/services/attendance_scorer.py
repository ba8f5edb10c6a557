"""
Attendance-derived score suggestion.

The result is only the *suggested* reviewer score for the attendance
criterion; reviewers may override it with a justification.
"""
from typing import Optional

from faculty_appraisal.core.rounding import percentage
from faculty_appraisal.schemas.appraisal import AttendanceSummary

MAX_SCORE = 10
MIN_SCORE = 1
NO_DATA_SCORE = 7

# (threshold, penalty): cumulative, every threshold below which the
# percentage falls applies its penalty
PERCENTAGE_PENALTIES = ((95, 1), (90, 1), (85, 2), (80, 2))
LATE_PENALTIES = ((3, 1), (5, 1))


def calculate_attendance_score(summary: Optional[AttendanceSummary]) -> int:
    if summary is None:
        return NO_DATA_SCORE

    score = MAX_SCORE
    for threshold, penalty in PERCENTAGE_PENALTIES:
        if summary.attendance_percentage < threshold:
            score -= penalty
    for threshold, penalty in LATE_PENALTIES:
        if summary.late_count > threshold:
            score -= penalty

    return max(MIN_SCORE, score)


def summarize_attendance(
    total_working_days: int,
    present_days: int,
    leave_days: int = 0,
    late_count: int = 0,
    absent_days: Optional[int] = None,
) -> AttendanceSummary:
    """Build a summary from raw day counts; absent days default to the remainder."""
    if absent_days is None:
        absent_days = max(0, total_working_days - present_days - leave_days)
    return AttendanceSummary(
        total_working_days=total_working_days,
        present_days=present_days,
        absent_days=absent_days,
        leave_days=leave_days,
        late_count=late_count,
        attendance_percentage=percentage(present_days, total_working_days),
    )
