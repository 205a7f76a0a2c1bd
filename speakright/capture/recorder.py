"""
录音器
把麦克风数据块拼接成一段 WAV，达到时长上限时强制停止
"""
import io
import logging
import wave
from typing import Callable, Iterable, List, Optional

from speakright.capture.validation import CaptureError, recording_limit_message
from speakright.config import settings
from speakright.models.audio import AudioCapture, AudioChunk

logger = logging.getLogger(__name__)

_SAMPLE_WIDTH = 2  # PCM16


class Recorder:
    """
    录音会话

    用法:
        recorder = Recorder()
        capture = recorder.record(mic.chunks())

    或者手动 start() / feed() / stop()
    """

    def __init__(
        self,
        max_seconds: Optional[float] = None,
        on_limit: Optional[Callable[[str], None]] = None,
        contact_email: Optional[str] = None,
    ):
        self.max_seconds = settings.max_audio_seconds if max_seconds is None else max_seconds
        self.on_limit = on_limit
        self.contact_email = contact_email or settings.contact_email
        self._chunks: List[bytes] = []
        self._sample_rate: Optional[int] = None
        self._channels: Optional[int] = None
        self._frames = 0
        self.is_recording = False
        self.stopped_at_limit = False

    @property
    def elapsed(self) -> float:
        """已录制的秒数"""
        if not self._sample_rate:
            return 0.0
        return self._frames / self._sample_rate

    @property
    def limit_message(self) -> str:
        return recording_limit_message(self.max_seconds, self.contact_email)

    def start(self) -> None:
        self._chunks = []
        self._sample_rate = None
        self._channels = None
        self._frames = 0
        self.stopped_at_limit = False
        self.is_recording = True
        logger.info(f"[Capture] 开始录音 (上限 {self.max_seconds:.0f}s)")

    def feed(self, chunk: AudioChunk) -> bool:
        """
        追加一个数据块

        :return: 是否还可以继续录制
        """
        if not self.is_recording:
            return False
        if self._sample_rate is None:
            self._sample_rate = chunk.sample_rate
            self._channels = chunk.channels
        elif (chunk.sample_rate, chunk.channels) != (self._sample_rate, self._channels):
            raise CaptureError("Audio chunks must share sample rate and channel count")

        frame_size = _SAMPLE_WIDTH * chunk.channels
        frames = len(chunk.pcm16) // frame_size
        max_frames = int(self.max_seconds * chunk.sample_rate)
        allowed = max(0, max_frames - self._frames)

        if frames:
            take = min(frames, allowed)
            self._chunks.append(chunk.pcm16[:take * frame_size])
            self._frames += take

        if self._frames >= max_frames:
            self.stopped_at_limit = True
            self.is_recording = False
            logger.info(f"[Capture] 录音达到 {self.max_seconds:.0f}s 上限，强制停止")
            if self.on_limit:
                self.on_limit(self.limit_message)
            return False
        return True

    def stop(self) -> AudioCapture:
        """结束录音并导出为 WAV"""
        self.is_recording = False
        if not self._frames:
            raise CaptureError("No audio was recorded")

        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav:
            wav.setnchannels(self._channels)
            wav.setsampwidth(_SAMPLE_WIDTH)
            wav.setframerate(self._sample_rate)
            wav.writeframes(b"".join(self._chunks))

        duration = self.elapsed
        logger.info(f"[Capture] 录音完成: {duration:.2f}s")
        return AudioCapture(
            data=buffer.getvalue(),
            filename="recording.wav",
            duration=duration,
            source="recording",
        )

    def record(self, source: Iterable[AudioChunk]) -> AudioCapture:
        """从数据源持续录制，直到数据源结束或达到上限"""
        self.start()
        for chunk in source:
            if not self.feed(chunk):
                break
        return self.stop()
