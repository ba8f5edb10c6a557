"""
Appraisal domain value objects.

These are persisted as JSON through the collection store, so every model
round-trips through ``model_dump(mode="json")`` / ``model_validate``.
"""
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class CycleKind(str, Enum):
    MONTHLY = "Monthly"
    ANNUAL = "Annual"


class CycleStatus(str, Enum):
    DRAFT = "Draft"
    ACTIVE = "Active"
    COMPLETED = "Completed"


class AppraisalStatus(str, Enum):
    NOT_STARTED = "Not Started"
    SELF_ASSESSMENT = "Self Assessment"
    SUBMITTED = "Submitted"
    REVIEWED = "Reviewed"
    COMPLETED = "Completed"


class PerformanceCategory(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    NEEDS_IMPROVEMENT = "Needs Improvement"


class ResearchKind(str, Enum):
    JOURNAL = "Journal"
    CONFERENCE = "Conference"
    BOOK = "Book"
    OTHER = "Other"


class AdminCategory(str, Enum):
    COMMITTEE = "Committee"
    COORDINATION = "Coordination"
    MENTORING = "Mentoring"
    OTHER = "Other"


# --- Registry ---

class Criterion(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    weight: int = Field(..., ge=0, le=100)
    description: str = ""


class Cycle(BaseModel):
    id: str
    name: str
    start_date: date
    end_date: date
    kind: CycleKind = CycleKind.MONTHLY
    month_ordinal: Optional[int] = Field(None, ge=1, le=12)
    year: int
    status: CycleStatus = CycleStatus.DRAFT
    criteria: List[Criterion] = Field(default_factory=list)
    created_by: str = "System"
    created_at: Optional[datetime] = None
    # Annual summaries are per employee
    employee_id: Optional[str] = None

    @property
    def total_weight(self) -> int:
        return sum(c.weight for c in self.criteria)


# --- Employee submissions ---

class ResearchEntry(BaseModel):
    id: str
    title: str
    description: str = ""
    kind: ResearchKind = ResearchKind.OTHER
    attached_document_refs: List[str] = Field(default_factory=list)
    submitted_at: Optional[datetime] = None


class AdminContribution(BaseModel):
    id: str
    title: str
    description: str = ""
    category: AdminCategory = AdminCategory.OTHER
    submitted_at: Optional[datetime] = None


class AttendanceSummary(BaseModel):
    total_working_days: int = Field(0, ge=0)
    present_days: int = Field(0, ge=0)
    absent_days: int = Field(0, ge=0)
    leave_days: int = Field(0, ge=0)
    late_count: int = Field(0, ge=0)
    attendance_percentage: float = Field(0, ge=0, le=100)


# --- Scores ---

class ContributionScores(BaseModel):
    research: float
    admin: float
    reasoning: str


class SystemScores(BaseModel):
    student_feedback: float
    attendance: int


class ManualAssessment(BaseModel):
    """Employee-entered score for a criterion with no system source."""
    score: int = Field(5, ge=1, le=10)
    comments: str = ""


class SelfAssessment(BaseModel):
    criterion_id: str
    criterion_name: str
    score: float
    comments: str = ""
    documents: List[str] = Field(default_factory=list)


class ReviewerAssessment(BaseModel):
    criterion_id: str
    criterion_name: str
    self_score: float
    reviewer_score: float
    reviewer_comments: str = ""
    # Seeded value the reviewer started from; the attendance override check compares against it
    suggested_score: Optional[float] = None
    is_attendance_auto_suggested: bool = False
    attendance_adjusted: bool = False


class AIInsights(BaseModel):
    overall_summary: str
    strengths: List[str]
    areas_for_improvement: List[str]
    training_suggestions: List[str]
    attendance_impact: str
    generated_at: Optional[datetime] = None


# --- The central record ---

class Appraisal(BaseModel):
    id: str
    cycle_id: str
    cycle_name: str = ""
    employee_id: str
    employee_name: str = ""
    department: str = ""
    status: AppraisalStatus = AppraisalStatus.NOT_STARTED
    research_entries: List[ResearchEntry] = Field(default_factory=list)
    admin_contributions: List[AdminContribution] = Field(default_factory=list)
    manual_assessments: Dict[str, ManualAssessment] = Field(default_factory=dict)
    contribution_scores: Optional[ContributionScores] = None
    system_scores: Optional[SystemScores] = None
    self_assessments: List[SelfAssessment] = Field(default_factory=list)
    reviewer_assessments: List[ReviewerAssessment] = Field(default_factory=list)
    reviewer_id: Optional[str] = None
    reviewer_name: Optional[str] = None
    created_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    ai_insights: Optional[AIInsights] = None
    final_score: Optional[float] = None
    performance_category: Optional[PerformanceCategory] = None
    final_recommendations: Optional[str] = None
    attendance_summary: Optional[AttendanceSummary] = None
    # Annual rollups only: ids of the monthly records they summarise
    source_appraisal_ids: List[str] = Field(default_factory=list)
