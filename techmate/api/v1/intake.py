"""
Voice intake API endpoints

The browser opens the microphone with the constraints returned in the
session payload and uploads one chunk per collection interval.
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional
import uuid

from techmate.api.errors import to_http_exception
from techmate.api.v1.interventions import serialize_intervention
from techmate.core.database import get_db
from techmate.core.errors import TechMateError
from techmate.services.intake_pipeline import IntakeSession, IntakeSessionRegistry, ProcessingStep, get_intake_registry
from techmate.services.intervention_service import get_intervention
from techmate.services.reference_service import get_active_machine, get_active_technician

router = APIRouter()


class DraftUpdateRequest(BaseModel):
    machine_id: Optional[uuid.UUID] = None
    technician_id: Optional[uuid.UUID] = None
    problem_description: Optional[str] = None


class StartRecordingRequest(BaseModel):
    device_error: Optional[str] = None  # e.g. "NotAllowedError" from getUserMedia


def _get_session(session_id: uuid.UUID, registry: IntakeSessionRegistry) -> IntakeSession:
    session = registry.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Intake session not found")
    return session


@router.post("/sessions", status_code=201)
async def create_session(registry: IntakeSessionRegistry = Depends(get_intake_registry)):
    """Open a new intake session"""
    session = registry.create()
    return session.to_dict()


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: uuid.UUID,
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
):
    """Current step, draft fields and notifications"""
    return _get_session(session_id, registry).to_dict()


@router.patch("/sessions/{session_id}")
async def update_draft(
    session_id: uuid.UUID,
    request: DraftUpdateRequest,
    db: Session = Depends(get_db),
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
):
    """Select machine/technician or edit the description; allowed in every step"""
    session = _get_session(session_id, registry)
    fields = request.model_fields_set

    if "machine_id" in fields:
        if request.machine_id:
            machine = get_active_machine(db, request.machine_id)
            if not machine:
                raise HTTPException(status_code=404, detail="Machine not found")
            session.select_machine(machine.id, machine.model, machine.location)
        else:
            session.select_machine(None)

    if "technician_id" in fields:
        if request.technician_id and not get_active_technician(db, request.technician_id):
            raise HTTPException(status_code=404, detail="Technician not found")
        session.select_technician(request.technician_id)

    if "problem_description" in fields:
        session.set_problem_description(request.problem_description)

    return session.to_dict()


@router.post("/sessions/{session_id}/recording/start")
async def start_recording(
    session_id: uuid.UUID,
    request: Optional[StartRecordingRequest] = None,
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
):
    """
    Begin capture

    A device failure is not an HTTP error: the session returns to idle and
    carries the notification. Reported while recording, it ends the capture.
    """
    session = _get_session(session_id, registry)
    device_error = request.device_error if request else None
    try:
        if device_error and session.step == ProcessingStep.RECORDING:
            session.report_device_error(device_error)
        else:
            session.start_recording(device_error=device_error)
    except TechMateError as e:
        raise to_http_exception(e)
    return session.to_dict()


@router.post("/sessions/{session_id}/recording/chunks")
async def upload_chunk(
    session_id: uuid.UUID,
    raw_request: Request,
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
):
    """Append one audio chunk (raw request body)"""
    session = _get_session(session_id, registry)
    chunk = await raw_request.body()
    try:
        count = session.add_chunk(chunk)
    except TechMateError as e:
        raise to_http_exception(e)
    return {"session_id": str(session.id), "chunks": count}


@router.post("/sessions/{session_id}/recording/stop")
async def stop_recording(
    session_id: uuid.UUID,
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
):
    """Stop capture, transcribe and generate a solution"""
    session = _get_session(session_id, registry)
    try:
        await session.stop_recording()
    except TechMateError as e:
        raise to_http_exception(e)
    return session.to_dict()


@router.post("/sessions/{session_id}/solution")
async def regenerate_solution(
    session_id: uuid.UUID,
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
):
    """Generate a solution for a manually written description"""
    session = _get_session(session_id, registry)
    try:
        await session.regenerate_solution()
    except TechMateError as e:
        raise to_http_exception(e)
    return session.to_dict()


@router.post("/sessions/{session_id}/save", status_code=201)
async def save_session(
    session_id: uuid.UUID,
    db: Session = Depends(get_db),
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
):
    """Persist the draft as a new intervention and close the session"""
    session = _get_session(session_id, registry)
    try:
        intervention = session.save(db)
    except TechMateError as e:
        raise to_http_exception(e)

    registry.discard(session.id)
    return serialize_intervention(get_intervention(db, intervention.id))


@router.delete("/sessions/{session_id}", status_code=204)
async def discard_session(
    session_id: uuid.UUID,
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
):
    """Abandon the draft; in-flight AI calls finish without effect"""
    if not registry.discard(session_id):
        raise HTTPException(status_code=404, detail="Intake session not found")
