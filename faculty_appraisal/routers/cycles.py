from fastapi import APIRouter, Depends, status
from typing import List, Optional

from faculty_appraisal.routers.auth_deps import get_current_identity, get_cycle_service
from faculty_appraisal.schemas.appraisal import Cycle, CycleKind, CycleStatus
from faculty_appraisal.schemas.identity import Identity
from faculty_appraisal.schemas.workflow import CycleCreate, CycleUpdate
from faculty_appraisal.services.cycle_service import CycleService

router = APIRouter(
    prefix="/cycles",
    tags=["cycles"]
)


@router.get("", response_model=List[Cycle])
def list_cycles(
    kind: Optional[CycleKind] = None,
    status: Optional[CycleStatus] = None,
    identity: Identity = Depends(get_current_identity),
    service: CycleService = Depends(get_cycle_service),
):
    return service.list_cycles(kind=kind, status=status)


@router.get("/available", response_model=List[Cycle])
def available_cycles(
    identity: Identity = Depends(get_current_identity),
    service: CycleService = Depends(get_cycle_service),
):
    """Active monthly cycles the caller can still start an appraisal for."""
    return service.available_cycles(identity.id)


@router.get("/{cycle_id}", response_model=Cycle)
def get_cycle(
    cycle_id: str,
    identity: Identity = Depends(get_current_identity),
    service: CycleService = Depends(get_cycle_service),
):
    return service.get_cycle(cycle_id)


@router.post("", response_model=Cycle, status_code=status.HTTP_201_CREATED)
def create_cycle(
    request: CycleCreate,
    identity: Identity = Depends(get_current_identity),
    service: CycleService = Depends(get_cycle_service),
):
    return service.create_cycle(identity, request)


@router.put("/{cycle_id}", response_model=Cycle)
def update_cycle(
    cycle_id: str,
    request: CycleUpdate,
    identity: Identity = Depends(get_current_identity),
    service: CycleService = Depends(get_cycle_service),
):
    return service.update_cycle(identity, cycle_id, request)


@router.delete("/{cycle_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cycle(
    cycle_id: str,
    identity: Identity = Depends(get_current_identity),
    service: CycleService = Depends(get_cycle_service),
):
    service.delete_cycle(identity, cycle_id)


@router.post("/{cycle_id}/activate", response_model=Cycle)
def activate_cycle(
    cycle_id: str,
    identity: Identity = Depends(get_current_identity),
    service: CycleService = Depends(get_cycle_service),
):
    return service.activate_cycle(identity, cycle_id)


@router.post("/{cycle_id}/complete", response_model=Cycle)
def complete_cycle(
    cycle_id: str,
    identity: Identity = Depends(get_current_identity),
    service: CycleService = Depends(get_cycle_service),
):
    return service.complete_cycle(identity, cycle_id)
