"""
Audio capture for voice intake

The browser owns the microphone and uploads one chunk per collection
interval; the server side holds the capture exclusively for the duration of
one recording and concatenates the chunks when the recording stops.
"""
import base64
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from techmate.core.config import settings
from techmate.core.errors import DeviceAccessError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AudioConfig:
    """Input stream constraints requested from the device"""
    sample_rate: int = 16000
    channels: int = 1
    echo_cancellation: bool = True
    noise_suppression: bool = True
    timeslice_ms: int = 1000
    mime_type: str = "audio/webm;codecs=opus"

    @classmethod
    def from_settings(cls) -> "AudioConfig":
        return cls(
            sample_rate=settings.AUDIO_SAMPLE_RATE,
            channels=settings.AUDIO_CHANNELS,
            timeslice_ms=settings.AUDIO_TIMESLICE_MS,
            mime_type=settings.AUDIO_MIME_TYPE,
        )

    def to_constraints(self) -> dict:
        """Constraints in the shape the client passes to getUserMedia"""
        return {
            "audio": {
                "sampleRate": self.sample_rate,
                "channelCount": self.channels,
                "echoCancellation": self.echo_cancellation,
                "noiseSuppression": self.noise_suppression,
            },
            "mimeType": self.mime_type,
            "timeslice": self.timeslice_ms,
        }


class AudioCapture(Protocol):
    config: AudioConfig

    def push(self, chunk: bytes) -> None: ...

    def payload(self) -> bytes: ...

    def release(self) -> None: ...


class AudioSource(Protocol):
    def acquire(self, config: AudioConfig) -> AudioCapture: ...

    def deny(self, reason: str) -> None: ...

    def allow(self) -> None: ...


class ChunkedCapture:
    """One recording's worth of buffered chunks"""

    def __init__(self, source: "ChunkedAudioSource", config: AudioConfig):
        self._source = source
        self.config = config
        self.chunks: List[bytes] = []
        self.released = False

    def push(self, chunk: bytes) -> None:
        if self.released:
            raise DeviceAccessError("A gravação já terminou.")
        if chunk:
            self.chunks.append(chunk)

    def payload(self) -> bytes:
        return b"".join(self.chunks)

    def release(self) -> None:
        if not self.released:
            self.released = True
            self._source._on_release(self)


class ChunkedAudioSource:
    """
    Exclusive, chunk-fed audio input

    ``acquire`` fails with DeviceAccessError when the client reported that
    the microphone is unavailable, or while another capture still holds it.
    """

    def __init__(self):
        self._active: Optional[ChunkedCapture] = None
        self._denied_reason: Optional[str] = None

    @property
    def in_use(self) -> bool:
        return self._active is not None

    def deny(self, reason: str = "permission denied") -> None:
        self._denied_reason = reason

    def allow(self) -> None:
        self._denied_reason = None

    def acquire(self, config: AudioConfig) -> ChunkedCapture:
        if self._denied_reason:
            logger.warning("Audio device unavailable: %s", self._denied_reason)
            raise DeviceAccessError(detail=self._denied_reason)
        if self._active is not None:
            raise DeviceAccessError("O microfone já está a ser usado por outra gravação.")
        self._active = ChunkedCapture(self, config)
        return self._active

    def _on_release(self, capture: ChunkedCapture) -> None:
        if self._active is capture:
            self._active = None


def encode_audio(payload: bytes) -> str:
    """Base64 without a data-URL prefix"""
    return base64.b64encode(payload).decode("ascii")
