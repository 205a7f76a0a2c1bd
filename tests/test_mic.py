from __future__ import annotations

import itertools
import wave
from pathlib import Path

import pytest

from speakright import cli
from speakright.capture.mic import MicError, SoundDeviceMicSource


class _FakeStream:
    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs

    def __enter__(self) -> "_FakeStream":
        return self

    def __exit__(self, *exc) -> bool:
        return False

    def read(self, frames: int):
        return b"\x01\x00" * frames, False


class _FakeSoundDevice:
    RawInputStream = _FakeStream


@pytest.fixture
def fake_sounddevice(monkeypatch) -> None:
    monkeypatch.setattr(SoundDeviceMicSource, "_import_sounddevice", staticmethod(lambda: _FakeSoundDevice))


def test_mic_source_validates_arguments() -> None:
    with pytest.raises(ValueError):
        SoundDeviceMicSource(chunk_seconds=0)
    with pytest.raises(ValueError):
        SoundDeviceMicSource(channels=3)


def test_mic_source_yields_pcm_chunks(fake_sounddevice) -> None:
    source = SoundDeviceMicSource(chunk_seconds=0.25, sample_rate=16000)
    chunks = list(itertools.islice(source.chunks(), 2))

    assert len(chunks) == 2
    assert chunks[0].sample_rate == 16000
    assert chunks[0].duration == pytest.approx(0.25)
    assert len(chunks[0].pcm16) == 4000 * 2


def test_cli_record_stops_at_limit(fake_sounddevice, tmp_path: Path, capsys) -> None:
    out = tmp_path / "take.wav"

    assert cli.main(["record", str(out), "--max-seconds", "1"]) == 0

    captured = capsys.readouterr()
    assert "Recording stopped at 1 seconds." in captured.err
    assert "Saved" in captured.out
    with wave.open(str(out), "rb") as wav:
        assert wav.getnframes() == 16000


def test_cli_record_without_sounddevice(monkeypatch, tmp_path: Path, capsys) -> None:
    def missing():
        raise MicError("sounddevice is not installed.")

    monkeypatch.setattr(SoundDeviceMicSource, "_import_sounddevice", staticmethod(missing))

    assert cli.main(["record", str(tmp_path / "x.wav")]) == 1
    assert "sounddevice is not installed" in capsys.readouterr().err
