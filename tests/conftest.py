from __future__ import annotations

import wave
from pathlib import Path
from typing import Callable

import pytest

from speakright.config import Settings


@pytest.fixture
def make_wav(tmp_path: Path) -> Callable[..., Path]:
    def _make(seconds: float, name: str = "clip.wav", sample_rate: int = 8000) -> Path:
        path = tmp_path / name
        with wave.open(str(path), "wb") as wav:
            wav.setnchannels(1)
            wav.setsampwidth(2)
            wav.setframerate(sample_rate)
            wav.writeframes(b"\x00\x00" * int(seconds * sample_rate))
        return path

    return _make


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        llm_api_key="test-key",
        llm_max_retries=3,
        llm_retry_delay=0.0,
        max_audio_seconds=30.0,
        contact_email="support@example.com",
    )
