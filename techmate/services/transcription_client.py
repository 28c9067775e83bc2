"""
Speech-to-text adapter
"""
import base64
import binascii
import logging
import httpx
from typing import Optional
from techmate.core.config import settings
from techmate.core.errors import TranscriptionError

logger = logging.getLogger(__name__)


class TranscriptionClient:
    """Client for an OpenAI-compatible /audio/transcriptions endpoint"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        language: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.base_url = (base_url or settings.TRANSCRIPTION_API_URL).rstrip("/")
        self.api_key = settings.TRANSCRIPTION_API_KEY if api_key is None else api_key
        self.model = model or settings.TRANSCRIPTION_MODEL
        self.language = language or settings.TRANSCRIPTION_LANGUAGE
        self.client = http_client or httpx.AsyncClient(timeout=settings.TRANSCRIPTION_TIMEOUT_SECONDS)

    async def transcribe(self, audio_base64: str) -> str:
        """
        Transcribe a base64-encoded recording

        Returns the plain transcription text. Raises TranscriptionError for
        bad input, missing credentials and any non-success answer.
        """
        if not audio_base64:
            raise TranscriptionError("Nenhum áudio recebido.")
        if not self.api_key:
            logger.error("TRANSCRIPTION_API_KEY not configured")
            raise TranscriptionError(detail="TRANSCRIPTION_API_KEY is not configured")

        try:
            audio = base64.b64decode(audio_base64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise TranscriptionError(detail="Audio payload is not valid base64") from e

        files = {"file": ("audio.webm", audio, "audio/webm")}
        data = {"model": self.model, "language": self.language}
        headers = {"Authorization": f"Bearer {self.api_key}"}

        logger.info("Transcribing %d bytes of audio", len(audio))
        try:
            response = await self.client.post(
                f"{self.base_url}/audio/transcriptions",
                files=files,
                data=data,
                headers=headers
            )
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Transcription error: %s %s", e.response.status_code, e.response.text[:500])
            raise TranscriptionError(detail=f"Transcription error: {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Transcription request failed: %s", e)
            raise TranscriptionError(detail=str(e)) from e

        text = (result.get("text") or "").strip()
        if not text:
            raise TranscriptionError("Não foi detetada fala na gravação.")
        return text

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()


# Singleton instance
_transcription_client: Optional[TranscriptionClient] = None


def get_transcription_client() -> TranscriptionClient:
    """Get singleton transcription client instance"""
    global _transcription_client
    if _transcription_client is None:
        _transcription_client = TranscriptionClient()
    return _transcription_client


async def close_transcription_client() -> None:
    """Close the singleton on shutdown"""
    global _transcription_client
    if _transcription_client is not None:
        await _transcription_client.close()
        _transcription_client = None
