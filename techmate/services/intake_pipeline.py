"""
Voice intake pipeline - state machine for creating one intervention

Flow:
1. Acquire the audio input and buffer chunks (recording)
2. Encode the recording and transcribe it (transcribing)
3. Ask the AI gateway for a repair suggestion (generating)
4. Wait for the technician to confirm, then persist (save)

Every stage failure is caught here, returns the session to idle and is
reported as a notification; fields filled by earlier stages are kept.
"""
import enum
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from techmate.core.config import settings
from techmate.core.errors import (
    DeviceAccessError,
    GenerationError,
    PersistenceError,
    PipelineBusyError,
    TechMateError,
    TranscriptionError,
    ValidationError,
)
from techmate.core.logging import truncate
from techmate.models.intervention import Intervention, InterventionPriority, InterventionStatus
from techmate.services.audio import AudioConfig, AudioSource, ChunkedAudioSource, encode_audio

logger = logging.getLogger(__name__)

Transcriber = Callable[[str], Awaitable[str]]
SolutionGenerator = Callable[[str, Optional[str], Optional[str]], Awaitable[str]]


class ProcessingStep(str, enum.Enum):
    IDLE = "idle"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    GENERATING = "generating"
    COMPLETE = "complete"


IN_FLIGHT_STEPS = (ProcessingStep.TRANSCRIBING, ProcessingStep.GENERATING)


@dataclass
class Notification:
    title: str
    message: str
    variant: str = "default"  # "default" | "destructive"
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, str]:
        return {
            "title": self.title,
            "message": self.message,
            "variant": self.variant,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class MachineContext:
    """Selected machine as the generation prompt needs it"""
    id: uuid.UUID
    name: Optional[str] = None
    location: Optional[str] = None


async def _default_transcriber(audio_base64: str) -> str:
    from techmate.services.transcription_client import get_transcription_client
    return await get_transcription_client().transcribe(audio_base64)


async def _default_solution_generator(
    problem_description: str,
    machine_name: Optional[str],
    machine_location: Optional[str]
) -> str:
    from techmate.services.solution_service import generate_solution
    return await generate_solution(problem_description, machine_name, machine_location)


class IntakeSession:
    """Draft of one intervention and the voice pipeline that fills it"""

    def __init__(
        self,
        audio_source: Optional[AudioSource] = None,
        transcriber: Optional[Transcriber] = None,
        solution_generator: Optional[SolutionGenerator] = None,
        audio_config: Optional[AudioConfig] = None,
        session_id: Optional[uuid.UUID] = None
    ):
        self.id = session_id or uuid.uuid4()
        self.audio_source = audio_source or ChunkedAudioSource()
        self.audio_config = audio_config or AudioConfig.from_settings()
        self._transcribe = transcriber or _default_transcriber
        self._generate = solution_generator or _default_solution_generator

        self.step = ProcessingStep.IDLE
        self.machine: Optional[MachineContext] = None
        self.technician_id: Optional[uuid.UUID] = None
        self.problem_description: str = ""
        self._ai_solution: Optional[str] = None
        self._capture = None

        self.notifications: List[Notification] = []
        self.last_error: Optional[TechMateError] = None
        self.saved_intervention_id: Optional[uuid.UUID] = None
        self.closed = False
        self.last_activity: Optional[float] = None  # registry clock reading

    # --- draft fields -------------------------------------------------------

    @property
    def ai_solution(self) -> Optional[str]:
        return self._ai_solution

    @property
    def machine_id(self) -> Optional[uuid.UUID]:
        return self.machine.id if self.machine else None

    @property
    def can_toggle_recording(self) -> bool:
        return self.step not in IN_FLIGHT_STEPS

    def select_machine(
        self,
        machine_id: Optional[uuid.UUID],
        name: Optional[str] = None,
        location: Optional[str] = None
    ) -> None:
        self.machine = MachineContext(machine_id, name, location) if machine_id else None

    def select_technician(self, technician_id: Optional[uuid.UUID]) -> None:
        self.technician_id = technician_id

    def set_problem_description(self, text: Optional[str]) -> None:
        """Manual entry; allowed in every step"""
        self.problem_description = text or ""

    # --- recording ----------------------------------------------------------

    def start_recording(self, device_error: Optional[str] = None) -> ProcessingStep:
        """
        Acquire the audio input and start buffering

        ``device_error`` is the client's report that the microphone could not
        be opened; the source is marked denied and the session stays idle.
        A start without it clears any earlier denial.
        """
        if self.step in IN_FLIGHT_STEPS:
            raise PipelineBusyError()
        if self.step == ProcessingStep.RECORDING:
            raise PipelineBusyError("Já existe uma gravação em curso.")

        if device_error:
            self.audio_source.deny(device_error)
        else:
            self.audio_source.allow()

        try:
            self._capture = self.audio_source.acquire(self.audio_config)
        except DeviceAccessError as e:
            self._capture = None
            return self._fail(e)

        self.last_error = None
        self.step = ProcessingStep.RECORDING
        logger.info("Intake %s: recording started", self.id)
        return self.step

    def add_chunk(self, chunk: bytes) -> int:
        """Buffer one collected chunk; returns the number of chunks held"""
        if self.step != ProcessingStep.RECORDING or self._capture is None:
            raise PipelineBusyError("Nenhuma gravação em curso.")
        self._capture.push(chunk)
        return len(self._capture.chunks)

    def report_device_error(self, reason: str) -> ProcessingStep:
        """Client lost the microphone mid-recording"""
        self._release_capture()
        return self._fail(DeviceAccessError(detail=reason))

    async def stop_recording(self) -> ProcessingStep:
        """Stop capture, then transcribe and generate in sequence"""
        if self.step != ProcessingStep.RECORDING or self._capture is None:
            raise PipelineBusyError("Nenhuma gravação em curso.")

        payload = self._capture.payload()
        self._release_capture()

        self.step = ProcessingStep.TRANSCRIBING
        logger.info("Intake %s: transcribing %d bytes", self.id, len(payload))
        if not payload:
            return self._fail(TranscriptionError("Nenhum áudio foi gravado."))

        try:
            text = await self._transcribe(encode_audio(payload))
        except TranscriptionError as e:
            return self._fail(e)
        except Exception as e:
            logger.exception("Intake %s: transcription failed", self.id)
            return self._fail(TranscriptionError(detail=str(e)))
        if self.closed:
            return self.step

        self.problem_description = text
        return await self._generate_solution()

    async def regenerate_solution(self) -> ProcessingStep:
        """Run only the generation stage on the current description"""
        if self.step in IN_FLIGHT_STEPS or self.step == ProcessingStep.RECORDING:
            raise PipelineBusyError()
        if not self.problem_description.strip():
            raise ValidationError(["problem_description"])
        return await self._generate_solution()

    async def _generate_solution(self) -> ProcessingStep:
        self.step = ProcessingStep.GENERATING
        self._ai_solution = None
        logger.info("Intake %s: generating solution for %s", self.id, truncate(self.problem_description))

        machine_name = self.machine.name if self.machine else None
        machine_location = self.machine.location if self.machine else None
        try:
            solution = await self._generate(self.problem_description, machine_name, machine_location)
        except GenerationError as e:
            return self._fail(e)
        except Exception as e:
            logger.exception("Intake %s: generation failed", self.id)
            return self._fail(GenerationError(detail=str(e)))
        if self.closed:
            return self.step

        self._ai_solution = solution
        self.step = ProcessingStep.COMPLETE
        self.last_error = None
        self._notify(
            "Processamento concluído",
            "Áudio transcrito e solução gerada com sucesso!"
        )
        logger.info("Intake %s: complete", self.id)
        return self.step

    # --- commit -------------------------------------------------------------

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.machine_id:
            missing.append("machine_id")
        if not self.technician_id:
            missing.append("technician_id")
        if not self.problem_description.strip():
            missing.append("problem_description")
        return missing

    def save(self, db: Session) -> Intervention:
        """Persist the draft as a new pending/medium intervention"""
        if self.saved_intervention_id:
            raise PipelineBusyError("Esta intervenção já foi guardada.")
        if self.step in IN_FLIGHT_STEPS or self.step == ProcessingStep.RECORDING:
            raise PipelineBusyError()

        missing = self.missing_fields()
        if missing:
            error = ValidationError(missing)
            self._notify_error(error)
            raise error

        intervention = Intervention(
            machine_id=self.machine_id,
            technician_id=self.technician_id,
            problem_description=self.problem_description,
            ai_solution=self._ai_solution or None,
            status=InterventionStatus.PENDING,
            priority=InterventionPriority.MEDIUM
        )
        try:
            db.add(intervention)
            db.commit()
            db.refresh(intervention)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Intake %s: save failed: %s", self.id, e)
            error = PersistenceError(detail=str(e))
            self._notify_error(error)
            raise error from e

        self.saved_intervention_id = intervention.id
        self._notify("Intervenção criada", "A intervenção foi registada com sucesso.")
        logger.info("Intake %s: saved intervention %s", self.id, intervention.id)
        return intervention

    def close(self) -> None:
        """Session abandoned; in-flight calls finish without touching state"""
        self.closed = True
        self._release_capture()

    # --- helpers ------------------------------------------------------------

    def _release_capture(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None

    def _fail(self, error: TechMateError) -> ProcessingStep:
        logger.warning("Intake %s: %s failed: %s (%s)", self.id, self.step.value, error.message, error.detail)
        if self.closed:
            return self.step
        self.step = ProcessingStep.IDLE
        self._notify_error(error)
        return self.step

    def _notify_error(self, error: TechMateError) -> None:
        self.last_error = error
        self._notify(error.title, error.message, variant="destructive")

    def _notify(self, title: str, message: str, variant: str = "default") -> None:
        if not self.closed:
            self.notifications.append(Notification(title, message, variant))

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": str(self.id),
            "step": self.step.value,
            "can_toggle_recording": self.can_toggle_recording,
            "machine_id": str(self.machine_id) if self.machine_id else None,
            "technician_id": str(self.technician_id) if self.technician_id else None,
            "problem_description": self.problem_description,
            "ai_solution": self._ai_solution,
            "audio": self.audio_config.to_constraints(),
            "last_error": {
                "type": type(self.last_error).__name__,
                "title": self.last_error.title,
                "message": self.last_error.message,
            } if self.last_error else None,
            "notifications": [n.to_dict() for n in self.notifications],
            "saved_intervention_id": str(self.saved_intervention_id) if self.saved_intervention_id else None,
        }


class IntakeSessionRegistry:
    """
    Process-local store of open intake sessions

    Every create/get stamps the session's last activity. Sessions left idle
    for longer than the TTL (a closed tab never calls discard) are closed
    and dropped on the next create/get; sessions with a transcription or
    generation in flight are kept.
    """

    def __init__(
        self,
        session_factory: Callable[[], IntakeSession] = IntakeSession,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self._session_factory = session_factory
        self._sessions: Dict[uuid.UUID, IntakeSession] = {}
        self.ttl_seconds = settings.INTAKE_SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock

    def create(self) -> IntakeSession:
        now = self._clock()
        self.evict_idle(now)
        session = self._session_factory()
        session.last_activity = now
        self._sessions[session.id] = session
        return session

    def get(self, session_id: uuid.UUID) -> Optional[IntakeSession]:
        now = self._clock()
        self.evict_idle(now)
        session = self._sessions.get(session_id)
        if session is not None:
            session.last_activity = now
        return session

    def evict_idle(self, now: Optional[float] = None) -> int:
        """Discard sessions idle past the TTL; returns how many were dropped"""
        now = self._clock() if now is None else now
        expired = [
            session.id for session in self._sessions.values()
            if session.step not in IN_FLIGHT_STEPS
            and session.last_activity is not None
            and now - session.last_activity > self.ttl_seconds
        ]
        for session_id in expired:
            logger.info("Intake %s: evicted after %ss idle", session_id, self.ttl_seconds)
            self.discard(session_id)
        return len(expired)

    def discard(self, session_id: uuid.UUID) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True

    def __len__(self) -> int:
        return len(self._sessions)


# Singleton instance
_registry: Optional[IntakeSessionRegistry] = None


def get_intake_registry() -> IntakeSessionRegistry:
    """Get singleton intake session registry"""
    global _registry
    if _registry is None:
        _registry = IntakeSessionRegistry()
    return _registry
