"""
Appraisal Workflow Router
Handles the appraisal lifecycle: Self Assessment > Submit > Review > Finalize.
"""
from fastapi import APIRouter, Depends, status
from typing import List, Optional
from pydantic import BaseModel

from faculty_appraisal.routers.auth_deps import get_appraisal_service, get_current_identity
from faculty_appraisal.schemas.appraisal import Appraisal, AppraisalStatus, ReviewerAssessment
from faculty_appraisal.schemas.identity import Identity
from faculty_appraisal.schemas.workflow import (
    AdminContributionInput,
    DraftUpdate,
    FinalizationDefaults,
    FinalizeInput,
    ResearchEntryInput,
    ReviewSubmission,
    ScorePreviewRequest,
    ScorePreviewResponse,
)
from faculty_appraisal.services.appraisal_service import AppraisalService

router = APIRouter(
    prefix="/appraisals",
    tags=["appraisals"]
)


class AppraisalCreate(BaseModel):
    cycle_id: str


# --- Lookup ---

@router.get("", response_model=List[Appraisal])
def list_appraisals(
    status: Optional[AppraisalStatus] = None,
    employee_id: Optional[str] = None,
    cycle_id: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    return service.list_appraisals(identity, status=status, employee_id=employee_id, cycle_id=cycle_id)


@router.post("/preview-scores", response_model=ScorePreviewResponse)
def preview_scores(
    request: ScorePreviewRequest,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    """Suggested research/admin scores for unsaved entries. Nothing is stored."""
    scores = service.preview_contribution_scores(request.research_entries, request.admin_contributions)
    return ScorePreviewResponse(**scores.model_dump())


@router.get("/{appraisal_id}", response_model=Appraisal)
def get_appraisal(
    appraisal_id: str,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    return service.get(identity, appraisal_id)


# --- Self Assessment ---

@router.post("", response_model=Appraisal, status_code=status.HTTP_201_CREATED)
def create_appraisal(
    request: AppraisalCreate,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    return service.create(identity, request.cycle_id)


@router.put("/{appraisal_id}/draft", response_model=Appraisal)
def save_draft(
    appraisal_id: str,
    request: DraftUpdate,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    return service.save_draft(identity, appraisal_id, request)


@router.post("/{appraisal_id}/research", response_model=Appraisal)
def add_research_entry(
    appraisal_id: str,
    request: ResearchEntryInput,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    return service.add_research_entry(identity, appraisal_id, request)


@router.delete("/{appraisal_id}/research/{entry_id}", response_model=Appraisal)
def remove_research_entry(
    appraisal_id: str,
    entry_id: str,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    return service.remove_research_entry(identity, appraisal_id, entry_id)


@router.post("/{appraisal_id}/admin-contributions", response_model=Appraisal)
def add_admin_contribution(
    appraisal_id: str,
    request: AdminContributionInput,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    return service.add_admin_contribution(identity, appraisal_id, request)


@router.delete("/{appraisal_id}/admin-contributions/{entry_id}", response_model=Appraisal)
def remove_admin_contribution(
    appraisal_id: str,
    entry_id: str,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    return service.remove_admin_contribution(identity, appraisal_id, entry_id)


@router.post("/{appraisal_id}/submit", response_model=Appraisal)
def submit_appraisal(
    appraisal_id: str,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    return service.submit(identity, appraisal_id)


# --- Review ---

@router.get("/{appraisal_id}/review", response_model=List[ReviewerAssessment])
def start_review(
    appraisal_id: str,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    """Seeded reviewer working copy; attendance starts at the system suggestion."""
    return service.start_review(identity, appraisal_id)


@router.post("/{appraisal_id}/review", response_model=Appraisal)
def submit_review(
    appraisal_id: str,
    request: ReviewSubmission,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    return service.submit_review(identity, appraisal_id, request.assessments)


# --- Finalization ---

@router.get("/{appraisal_id}/finalization", response_model=FinalizationDefaults)
def get_finalization_defaults(
    appraisal_id: str,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    return service.finalization_defaults(identity, appraisal_id)


@router.post("/{appraisal_id}/finalize", response_model=Appraisal)
def finalize_appraisal(
    appraisal_id: str,
    request: Optional[FinalizeInput] = None,
    identity: Identity = Depends(get_current_identity),
    service: AppraisalService = Depends(get_appraisal_service),
):
    return service.finalize(identity, appraisal_id, request)
