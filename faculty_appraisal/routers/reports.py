from fastapi import APIRouter, Depends
from typing import Optional

from faculty_appraisal.routers.auth_deps import get_current_identity, get_report_service, get_rollup_service
from faculty_appraisal.schemas.appraisal import PerformanceCategory
from faculty_appraisal.schemas.identity import Identity
from faculty_appraisal.schemas.workflow import AnnualRollupResult, AppraisalSummaryReport, RollupRequest
from faculty_appraisal.services.reports import ReportService
from faculty_appraisal.services.rollup import RollupService

router = APIRouter(
    prefix="/reports",
    tags=["reports"]
)


@router.post("/annual-rollup", response_model=AnnualRollupResult)
def annual_rollup(
    request: RollupRequest,
    identity: Identity = Depends(get_current_identity),
    service: RollupService = Depends(get_rollup_service),
):
    annual = service.run(identity, request.employee_id, request.year)
    return AnnualRollupResult(
        months=len(annual.source_appraisal_ids),
        final_score=annual.final_score,
        performance_category=annual.performance_category,
        attendance_summary=annual.attendance_summary,
        appraisal_id=annual.id,
        cycle_id=annual.cycle_id,
    )


@router.get("/summary", response_model=AppraisalSummaryReport)
def appraisal_summary(
    cycle_id: Optional[str] = None,
    category: Optional[PerformanceCategory] = None,
    department: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    service: ReportService = Depends(get_report_service),
):
    return service.summary(identity, cycle_id=cycle_id, category=category, department=department)
