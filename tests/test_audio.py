"""
Tests for chunked audio capture
"""
import base64

import pytest

from techmate.core.errors import DeviceAccessError
from techmate.services.audio import AudioConfig, ChunkedAudioSource, encode_audio


def test_capture_is_exclusive():
    source = ChunkedAudioSource()
    capture = source.acquire(AudioConfig())

    with pytest.raises(DeviceAccessError):
        source.acquire(AudioConfig())

    capture.release()
    assert not source.in_use
    source.acquire(AudioConfig()).release()


def test_chunks_are_concatenated_in_order():
    capture = ChunkedAudioSource().acquire(AudioConfig())
    for chunk in (b"one-", b"", b"two-", b"three"):
        capture.push(chunk)

    assert capture.chunks == [b"one-", b"two-", b"three"]
    assert capture.payload() == b"one-two-three"


def test_push_after_release_fails():
    capture = ChunkedAudioSource().acquire(AudioConfig())
    capture.release()

    with pytest.raises(DeviceAccessError):
        capture.push(b"late")


def test_denied_device():
    source = ChunkedAudioSource()
    source.deny("NotAllowedError")

    with pytest.raises(DeviceAccessError) as exc_info:
        source.acquire(AudioConfig())
    assert exc_info.value.detail == "NotAllowedError"

    source.allow()
    assert source.acquire(AudioConfig()) is not None


def test_default_constraints():
    constraints = AudioConfig().to_constraints()

    assert constraints["audio"] == {
        "sampleRate": 16000,
        "channelCount": 1,
        "echoCancellation": True,
        "noiseSuppression": True,
    }
    assert constraints["mimeType"] == "audio/webm;codecs=opus"
    assert constraints["timeslice"] == 1000


def test_encode_audio_has_no_data_url_prefix():
    encoded = encode_audio(b"\x1aE\xdf\xa3webm")

    assert not encoded.startswith("data:")
    assert base64.b64decode(encoded) == b"\x1aE\xdf\xa3webm"
