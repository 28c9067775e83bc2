"""
Interventions API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
import uuid

from techmate.api.errors import to_http_exception
from techmate.core.database import get_db
from techmate.core.errors import TechMateError
from techmate.models.intervention import Intervention, InterventionStatus
from techmate.services.intake_pipeline import IntakeSession
from techmate.services.intervention_lifecycle import update_intervention_status
from techmate.services.intervention_service import list_interventions, get_intervention
from techmate.services.reference_service import get_active_machine, get_active_technician

router = APIRouter()


class InterventionCreateRequest(BaseModel):
    machine_id: Optional[uuid.UUID] = None
    technician_id: Optional[uuid.UUID] = None
    problem_description: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: InterventionStatus


class InterventionResponse(BaseModel):
    id: uuid.UUID
    machine_id: Optional[uuid.UUID]
    technician_id: Optional[uuid.UUID]
    machine_name: Optional[str] = None
    technician_name: Optional[str] = None
    problem_description: Optional[str]
    ai_solution: Optional[str]
    audio_url: Optional[str]
    status: str
    priority: str
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime]


def serialize_intervention(intervention: Intervention) -> InterventionResponse:
    return InterventionResponse(
        id=intervention.id,
        machine_id=intervention.machine_id,
        technician_id=intervention.technician_id,
        machine_name=intervention.machine.model if intervention.machine else None,
        technician_name=intervention.technician.name if intervention.technician else None,
        problem_description=intervention.problem_description,
        ai_solution=intervention.ai_solution,
        audio_url=intervention.audio_url,
        status=InterventionStatus(intervention.status).value,
        priority=intervention.priority.value,
        created_at=intervention.created_at,
        updated_at=intervention.updated_at,
        resolved_at=intervention.resolved_at
    )


@router.get("", response_model=List[InterventionResponse])
async def get_interventions(
    status: Optional[InterventionStatus] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """List interventions, newest first"""
    interventions = list_interventions(db, status=status, search=search, limit=limit, offset=offset)
    return [serialize_intervention(i) for i in interventions]


@router.post("", response_model=InterventionResponse, status_code=201)
async def create_intervention(
    request: InterventionCreateRequest,
    db: Session = Depends(get_db)
):
    """Create an intervention from a manually filled form"""
    draft = IntakeSession()
    if request.machine_id:
        machine = get_active_machine(db, request.machine_id)
        if not machine:
            raise HTTPException(status_code=404, detail="Machine not found")
        draft.select_machine(machine.id, machine.model, machine.location)
    if request.technician_id:
        if not get_active_technician(db, request.technician_id):
            raise HTTPException(status_code=404, detail="Technician not found")
        draft.select_technician(request.technician_id)
    draft.set_problem_description(request.problem_description)

    try:
        intervention = draft.save(db)
    except TechMateError as e:
        raise to_http_exception(e)

    return serialize_intervention(get_intervention(db, intervention.id))


@router.get("/{intervention_id}", response_model=InterventionResponse)
async def get_intervention_detail(
    intervention_id: uuid.UUID,
    db: Session = Depends(get_db)
):
    """Get intervention details"""
    intervention = get_intervention(db, intervention_id)
    if not intervention:
        raise HTTPException(status_code=404, detail="Intervention not found")
    return serialize_intervention(intervention)


@router.patch("/{intervention_id}/status", response_model=InterventionResponse)
async def update_status(
    intervention_id: uuid.UUID,
    request: StatusUpdateRequest,
    db: Session = Depends(get_db)
):
    """Move an intervention to a new status"""
    try:
        update_intervention_status(db, intervention_id, request.status)
    except TechMateError as e:
        raise to_http_exception(e)

    return serialize_intervention(get_intervention(db, intervention_id))
