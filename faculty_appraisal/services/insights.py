"""
Rule-based insight synthesis for reviewed appraisals.

Deterministic: the same assessments, attendance summary and timestamp
always produce the same insights, in the same order.
"""
from datetime import datetime
from typing import List, Optional, Sequence

from faculty_appraisal.schemas.appraisal import AIInsights, AttendanceSummary, ReviewerAssessment

STRENGTH_THRESHOLD = 8
IMPROVEMENT_THRESHOLD = 5
DEFAULT_ATTENDANCE_PERCENTAGE = 85
OUTSTANDING_ATTENDANCE = 95
POOR_ATTENDANCE = 80

# Training line added when a low-scored criterion name contains the keyword
CRITERION_TRAINING = (
    ("Research", "Research methodology workshop recommended"),
    ("Teaching", "Pedagogy enhancement program suggested"),
)

ATTENDANCE_STRENGTH = "Excellent attendance record demonstrates strong commitment"
ATTENDANCE_IMPROVEMENT = "Attendance consistency requires attention"
ATTENDANCE_TRAINING = "Time management workshop recommended"

FILLER_STRENGTH = "Consistent performance across evaluation criteria"
FILLER_IMPROVEMENT = "Continue current trajectory with focus on innovation"
FILLER_TRAINING = "Leadership development program for career advancement"

IMPACT_OUTSTANDING = (
    "Outstanding attendance record (above 95%) positively contributes to overall performance "
    "evaluation, reflecting high commitment and reliability."
)
IMPACT_NEUTRAL = (
    "Good attendance record maintains satisfactory contribution to performance metrics. "
    "Minor improvements in punctuality could further enhance overall assessment."
)
IMPACT_NEGATIVE = (
    "Attendance below expected threshold impacts overall performance evaluation. "
    "Improved presence and punctuality are strongly recommended for the next evaluation period."
)

SUMMARY_EXCEPTIONAL = (
    "{name} demonstrates exceptional performance across all evaluation criteria. "
    "The faculty shows strong dedication to academic excellence with consistent delivery of "
    "high-quality teaching and research output. Continued focus on maintaining these standards "
    "will further enhance institutional contribution."
)
SUMMARY_GOOD = (
    "{name} shows good overall performance with notable strengths in core competencies. "
    "There are opportunities for improvement in specific areas that, when addressed, will elevate "
    "the overall performance profile. The faculty demonstrates commitment to professional growth."
)
SUMMARY_ATTENTION = (
    "{name} has areas requiring attention for performance improvement. A structured development "
    "plan focusing on identified gaps is recommended. With targeted support and training, "
    "significant improvement is achievable in the upcoming evaluation period."
)


def average_reviewer_score(assessments: Sequence[ReviewerAssessment]) -> float:
    # Empty list averages to 0 and lands in the lowest summary tier
    if not assessments:
        return 0.0
    return sum(a.reviewer_score for a in assessments) / len(assessments)


def summary_for(name: str, average: float) -> str:
    if average >= 8:
        template = SUMMARY_EXCEPTIONAL
    elif average >= 6:
        template = SUMMARY_GOOD
    else:
        template = SUMMARY_ATTENTION
    return template.format(name=name)


def attendance_impact_for(attendance_percentage: float) -> str:
    if attendance_percentage >= OUTSTANDING_ATTENDANCE:
        return IMPACT_OUTSTANDING
    if attendance_percentage < POOR_ATTENDANCE:
        return IMPACT_NEGATIVE
    return IMPACT_NEUTRAL


def with_fillers(strengths: List[str], improvements: List[str], training: List[str]):
    return (
        strengths or [FILLER_STRENGTH],
        improvements or [FILLER_IMPROVEMENT],
        training or [FILLER_TRAINING],
    )


def generate_insights(
    employee_name: str,
    assessments: Sequence[ReviewerAssessment],
    attendance: Optional[AttendanceSummary],
    generated_at: Optional[datetime] = None,
) -> AIInsights:
    strengths: List[str] = []
    improvements: List[str] = []
    training: List[str] = []

    for assessment in assessments:
        if assessment.reviewer_score >= STRENGTH_THRESHOLD:
            strengths.append(f"Strong performance in {assessment.criterion_name}")
        elif assessment.reviewer_score <= IMPROVEMENT_THRESHOLD:
            improvements.append(f"Enhancement needed in {assessment.criterion_name}")
            for keyword, suggestion in CRITERION_TRAINING:
                if keyword in assessment.criterion_name:
                    training.append(suggestion)

    rate = attendance.attendance_percentage if attendance is not None else DEFAULT_ATTENDANCE_PERCENTAGE
    if rate >= OUTSTANDING_ATTENDANCE:
        strengths.append(ATTENDANCE_STRENGTH)
    elif rate < POOR_ATTENDANCE:
        improvements.append(ATTENDANCE_IMPROVEMENT)
        training.append(ATTENDANCE_TRAINING)

    strengths, improvements, training = with_fillers(strengths, improvements, training)

    return AIInsights(
        overall_summary=summary_for(employee_name, average_reviewer_score(assessments)),
        strengths=strengths,
        areas_for_improvement=improvements,
        training_suggestions=training,
        attendance_impact=attendance_impact_for(rate),
        generated_at=generated_at,
    )
