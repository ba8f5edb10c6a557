from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from faculty_appraisal.schemas.appraisal import (
    AdminCategory,
    AttendanceSummary,
    ContributionScores,
    CycleStatus,
    Criterion,
    ManualAssessment,
    PerformanceCategory,
    ResearchKind,
)


# --- Cycles ---
class CycleCreate(BaseModel):
    name: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    month_ordinal: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = None
    status: CycleStatus = CycleStatus.DRAFT
    # Omitted -> default criteria set
    criteria: Optional[List[Criterion]] = None


class CycleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    month_ordinal: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = None
    criteria: Optional[List[Criterion]] = None


# --- Self assessment ---
class ResearchEntryInput(BaseModel):
    id: Optional[str] = None  # Present when re-saving an existing entry
    title: str = Field(..., min_length=1)
    description: str = ""
    kind: ResearchKind = ResearchKind.OTHER
    attached_document_refs: List[str] = []


class AdminContributionInput(BaseModel):
    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    description: str = ""
    category: AdminCategory = AdminCategory.OTHER


class DraftUpdate(BaseModel):
    """Whole-list replacement; a None field leaves that part of the draft as is."""
    research_entries: Optional[List[ResearchEntryInput]] = None
    admin_contributions: Optional[List[AdminContributionInput]] = None
    manual_assessments: Optional[Dict[str, ManualAssessment]] = None


class ScorePreviewRequest(BaseModel):
    research_entries: List[ResearchEntryInput] = []
    admin_contributions: List[AdminContributionInput] = []


class ScorePreviewResponse(ContributionScores):
    pass


# --- Review ---
class ReviewerScoreInput(BaseModel):
    criterion_id: str
    reviewer_score: float = Field(..., ge=1, le=10)
    reviewer_comments: str = ""
    # None -> derived from whether the attendance score moved off its suggestion
    attendance_adjusted: Optional[bool] = None


class ReviewSubmission(BaseModel):
    assessments: List[ReviewerScoreInput]


# --- Finalization ---
class FinalizationDefaults(BaseModel):
    final_score: float
    performance_category: PerformanceCategory
    average_score: float


class FinalizeInput(BaseModel):
    # None -> use the computed default
    final_score: Optional[float] = Field(None, ge=0, le=10)
    performance_category: Optional[PerformanceCategory] = None
    recommendations: str = ""


# --- Reporting ---
class RollupRequest(BaseModel):
    employee_id: str
    year: int


class AttendanceRow(BaseModel):
    employee_id: str
    employee_name: str
    cycle_name: str
    attendance_percentage: Optional[float] = None
    final_score: Optional[float] = None


class AppraisalSummaryReport(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    completed_count: int
    category_counts: Dict[str, int]
    average_score: float
    department_averages: Dict[str, float]
    attendance: List[AttendanceRow]


class AnnualRollupResult(BaseModel):
    months: int
    final_score: float
    performance_category: PerformanceCategory
    attendance_summary: Optional[AttendanceSummary] = None
    appraisal_id: str
    cycle_id: str
