"""
Tests for the speech-to-text adapter
"""
import httpx
import pytest

from techmate.core.errors import TranscriptionError
from techmate.services.audio import encode_audio
from techmate.services.transcription_client import TranscriptionClient


def make_client(handler, api_key="stt-key"):
    return TranscriptionClient(
        base_url="https://stt.test/v1",
        api_key=api_key,
        model="whisper-1",
        language="pt",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )


@pytest.mark.asyncio
async def test_transcribe_posts_multipart_audio():
    captured = {}

    def handler(request):
        captured["url"] = str(request.url)
        captured["content_type"] = request.headers["Content-Type"]
        captured["body"] = request.read()
        return httpx.Response(200, json={"text": "  motor faz ruído anómalo \n"})

    text = await make_client(handler).transcribe(encode_audio(b"webm-audio-bytes"))

    assert text == "motor faz ruído anómalo"
    assert captured["url"] == "https://stt.test/v1/audio/transcriptions"
    assert captured["content_type"].startswith("multipart/form-data")
    assert b"webm-audio-bytes" in captured["body"]
    assert b"whisper-1" in captured["body"]
    assert b'filename="audio.webm"' in captured["body"]


@pytest.mark.asyncio
async def test_upstream_error_is_reported():
    client = make_client(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(TranscriptionError) as exc_info:
        await client.transcribe(encode_audio(b"audio"))

    assert exc_info.value.detail == "Transcription error: 500"


@pytest.mark.asyncio
async def test_silence_is_an_error():
    client = make_client(lambda request: httpx.Response(200, json={"text": ""}))

    with pytest.raises(TranscriptionError):
        await client.transcribe(encode_audio(b"audio"))


@pytest.mark.asyncio
@pytest.mark.parametrize("audio", ["", "not base64 at all!"])
async def test_invalid_input_never_reaches_upstream(audio):
    def handler(request):
        raise AssertionError("upstream must not be called")

    with pytest.raises(TranscriptionError):
        await make_client(handler).transcribe(audio)


@pytest.mark.asyncio
async def test_missing_api_key():
    def handler(request):
        raise AssertionError("upstream must not be called")

    with pytest.raises(TranscriptionError):
        await make_client(handler, api_key="").transcribe(encode_audio(b"audio"))
