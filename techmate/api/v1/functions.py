"""
Speech-to-text and solution generation endpoints

Both answer with ``{"error": ...}`` and a non-2xx status on failure so the
browser can show a stage-specific message.
"""
import logging
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Optional

from techmate.core.errors import GenerationError, TranscriptionError, ValidationError
from techmate.services.solution_service import generate_solution
from techmate.services.transcription_client import get_transcription_client

logger = logging.getLogger(__name__)

router = APIRouter()


class TranscribeRequest(BaseModel):
    audio: Optional[str] = None


class GenerateSolutionRequest(BaseModel):
    problemDescription: Optional[str] = None
    machineName: Optional[str] = None
    machineLocation: Optional[str] = None


def _error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/transcribe-audio")
async def transcribe_audio(request: TranscribeRequest):
    """Transcribe base64 audio into plain text"""
    if not request.audio:
        logger.error("No audio provided")
        return _error_response("Audio is required", 400)

    try:
        text = await get_transcription_client().transcribe(request.audio)
    except TranscriptionError as e:
        return _error_response(e.detail or e.message, 500)

    return {"text": text}


@router.post("/generate-solution")
async def generate_solution_endpoint(request: GenerateSolutionRequest):
    """Generate an AI repair suggestion for a problem description"""
    try:
        solution = await generate_solution(
            request.problemDescription or "",
            machine_name=request.machineName,
            machine_location=request.machineLocation
        )
    except ValidationError:
        logger.error("No problem description provided")
        return _error_response("Problem description is required", 400)
    except GenerationError as e:
        return _error_response(e.detail or e.message, e.status_code)

    return {"solution": solution}
