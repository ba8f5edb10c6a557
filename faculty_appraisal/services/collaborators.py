"""
Upstream facts the workflow consumes but does not own.

Attendance records and student feedback live in other subsystems. The
workflow only needs a summary per (employee, period); the simulated
sources below stand in for those subsystems and are seeded from the
request so the same employee and period always yield the same figures.
"""
import hashlib
import random
from datetime import date
from typing import Dict, Optional, Protocol, Tuple

from faculty_appraisal.schemas.appraisal import AttendanceSummary
from faculty_appraisal.services.attendance_scorer import summarize_attendance


class AttendanceSource(Protocol):
    def summary_for(self, employee_id: str, start: date, end: date) -> Optional[AttendanceSummary]: ...


class FeedbackSource(Protocol):
    def score_for(self, employee_id: str, start: date, end: date) -> float: ...


def _rng(*parts) -> random.Random:
    digest = hashlib.sha256(":".join(str(p) for p in parts).encode()).hexdigest()
    return random.Random(int(digest[:16], 16))


class SimulatedAttendanceSource:
    WORKING_DAYS = 22

    def summary_for(self, employee_id: str, start: date, end: date) -> Optional[AttendanceSummary]:
        rng = _rng("attendance", employee_id, start, end)
        present = rng.randint(18, 22)
        leave = min(rng.randint(0, 2), self.WORKING_DAYS - present)
        late = rng.randint(0, 4)
        return summarize_attendance(self.WORKING_DAYS, present, leave_days=leave, late_count=late)


class SimulatedFeedbackSource:
    def score_for(self, employee_id: str, start: date, end: date) -> float:
        rng = _rng("feedback", employee_id, start, end)
        # 6.0 .. 9.5 in half-point steps
        return 6.0 + rng.randint(0, 7) * 0.5


class FixedAttendanceSource:
    """Returns pre-registered summaries; employees without one have no data."""

    def __init__(self, summaries: Optional[Dict[str, AttendanceSummary]] = None, default: Optional[AttendanceSummary] = None):
        self.summaries = summaries or {}
        self.default = default

    def summary_for(self, employee_id: str, start: date, end: date) -> Optional[AttendanceSummary]:
        return self.summaries.get(employee_id, self.default)


class FixedFeedbackSource:
    def __init__(self, score: float = 8.0, overrides: Optional[Dict[Tuple[str, date], float]] = None):
        self.score = score
        self.overrides = overrides or {}

    def score_for(self, employee_id: str, start: date, end: date) -> float:
        return self.overrides.get((employee_id, start), self.score)
