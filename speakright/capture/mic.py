"""
麦克风数据源 (sounddevice / PortAudio)
"""
import contextlib
import logging
from typing import Iterator, Optional

from speakright.models.audio import AudioChunk

logger = logging.getLogger(__name__)


class MicError(RuntimeError):
    pass


class SoundDeviceMicSource:
    """
    使用 `sounddevice` 采集固定时长的 PCM16 数据块

    需要安装: pip install speakright[mic]
    """

    def __init__(
        self,
        chunk_seconds: float = 0.5,
        sample_rate: int = 16000,
        channels: int = 1,
        device: Optional[int] = None,
    ):
        if chunk_seconds <= 0:
            raise ValueError("chunk_seconds must be > 0")
        if sample_rate <= 0:
            raise ValueError("sample_rate must be > 0")
        if channels not in (1, 2):
            raise ValueError("channels must be 1 or 2")

        self.chunk_seconds = float(chunk_seconds)
        self.sample_rate = int(sample_rate)
        self.channels = int(channels)
        self.device = device

    @staticmethod
    def _import_sounddevice():
        try:
            import sounddevice as sd
        except ImportError as e:
            raise MicError(
                "sounddevice is not installed. Install with: pip install speakright[mic]"
            ) from e
        return sd

    @contextlib.contextmanager
    def _open_stream(self):
        sd = self._import_sounddevice()
        try:
            stream = sd.RawInputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                device=self.device,
                blocksize=0,
            )
        except Exception as e:
            raise MicError("Failed to open microphone stream. Check microphone permission.") from e

        with stream:
            yield stream

    def chunks(self) -> Iterator[AudioChunk]:
        frames_per_chunk = max(1, int(round(self.chunk_seconds * self.sample_rate)))

        with self._open_stream() as stream:
            logger.info(f"[Mic] 麦克风已打开: sr={self.sample_rate}, channels={self.channels}")
            while True:
                data, overflowed = stream.read(frames_per_chunk)
                if overflowed:
                    logger.debug("[Mic] 输入缓冲溢出")
                yield AudioChunk(
                    pcm16=bytes(data),
                    sample_rate=self.sample_rate,
                    channels=self.channels,
                    duration=frames_per_chunk / self.sample_rate,
                )
