"""
播放-识别编排器

一边播放录音，一边驱动连续语音识别，把最终片段拼接成完整的识别文本。

播放器和识别器各自独立推送事件，所有事件（包括定时器）都进入同一个
asyncio.Queue，由一个状态机顺序消费。外部实现如果在其他线程推送事件，
需要通过 loop.call_soon_threadsafe 转交。

重试策略:
- no-speech: 清空已识别片段，重头播放，最多 max_no_speech_attempts 次
- network:   暂停并回到开头，等待后同时重启识别与播放，最多 max_network_retries 次
- 识别器在播放结束前自行结束: 透明重启，不计入任何重试次数
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable

from speakright.models.transcript import Transcript
from speakright.recognition.base import (
    AudioPlayer,
    PlaybackEnded,
    PlaybackFailed,
    PlaybackStarted,
    RecognitionEnded,
    RecognitionError,
    RecognitionResult,
    SpeechRecognizer,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecognitionTimings:
    """编排器的所有时间常量（秒）与重试上限"""
    load_timeout: float = 5.0
    start_delay: float = 0.5
    grace_window: float = 2.0
    no_speech_retry_delay: float = 0.5
    network_retry_delay: float = 2.0
    overall_timeout: float = 30.0
    max_no_speech_attempts: int = 3
    max_network_retries: int = 3


# ==================== 异常 ====================

class TranscriptionError(RuntimeError):
    """识别失败的基类，message 可以直接展示给用户"""


class AudioLoadError(TranscriptionError):
    pass


class PlaybackError(TranscriptionError):
    pass


class NoSpeechDetected(TranscriptionError):
    pass


class RecognitionTimeout(TranscriptionError):
    pass


class RecognitionNetworkError(TranscriptionError):
    pass


class RecognitionFailed(TranscriptionError):
    def __init__(self, message: str, kind: str = ""):
        super().__init__(message)
        self.kind = kind


NETWORK_FAILURE_MESSAGE = "Network connection failed. Please check your internet connection and try again."
NO_SPEECH_MESSAGE = "No speech detected in the recording. Please try again."


# ==================== 内部定时事件 ====================

@dataclass(frozen=True)
class _StartPlayback:
    pass


@dataclass(frozen=True)
class _NoSpeechRetryDue:
    pass


@dataclass(frozen=True)
class _NetworkRetryDue:
    pass


@dataclass(frozen=True)
class _GraceExpired:
    generation: int


@dataclass(frozen=True)
class _OverallTimeout:
    pass


@dataclass
class _RunState:
    """一次编排的可变状态"""
    transcript: Transcript = field(default_factory=Transcript)
    audio_finished: bool = False
    recognizer_active: bool = False
    no_speech_attempts: int = 0
    network_retries: int = 0
    no_speech_retry_pending: bool = False
    network_retry_pending: bool = False
    grace_generation: int = 0


class Orchestrator:
    """播放-识别编排器，每次 transcribe 独占一个播放器与识别器"""

    def __init__(self, timings: RecognitionTimings = RecognitionTimings()):
        self.timings = timings

    async def transcribe(self, player: AudioPlayer, recognizer: SpeechRecognizer) -> str:
        """
        播放音频并返回识别文本

        :return: 非空、去除首尾空白的识别文本
        :raises TranscriptionError: 任何无法恢复的失败
        """
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        sink = queue.put_nowait
        timers = []
        run = _RunState()

        def schedule(delay: float, event: object) -> None:
            timers.append(loop.call_later(delay, sink, event))

        player.connect(sink)
        recognizer.connect(sink)
        try:
            await self._load(player)

            schedule(self.timings.start_delay, _StartPlayback())
            schedule(self.timings.overall_timeout, _OverallTimeout())

            while True:
                event = await queue.get()
                text = self._handle(event, run, player, recognizer, schedule)
                if text is not None:
                    logger.info(f"[Orchestrator] 识别完成: {text!r}")
                    return text
        finally:
            for timer in timers:
                timer.cancel()
            player.disconnect(sink)
            recognizer.disconnect(sink)
            if run.recognizer_active:
                self._stop_recognizer(recognizer, run)
            try:
                player.pause()
            except Exception as e:
                logger.warning(f"[Orchestrator] 暂停播放失败: {e}")
            finally:
                player.release()
            logger.info("[Orchestrator] 资源已清理")

    async def _load(self, player: AudioPlayer) -> None:
        try:
            await asyncio.wait_for(player.load(), timeout=self.timings.load_timeout)
        except asyncio.TimeoutError as e:
            raise AudioLoadError("Audio loading timeout") from e
        except TranscriptionError:
            raise
        except Exception as e:
            raise AudioLoadError("Failed to load audio file") from e
        logger.info("[Orchestrator] 音频已就绪")

    # ==================== 状态机 ====================

    def _handle(
        self,
        event: object,
        run: _RunState,
        player: AudioPlayer,
        recognizer: SpeechRecognizer,
        schedule: Callable[[float, object], None],
    ):
        """处理一个事件；返回识别文本表示完成，返回 None 表示继续等待"""
        if isinstance(event, _StartPlayback):
            self._play(player)

        elif isinstance(event, PlaybackStarted):
            logger.info("[Orchestrator] 开始播放")
            run.audio_finished = False
            run.grace_generation += 1
            run.transcript.clear()
            if not run.recognizer_active:
                try:
                    self._start_recognizer(recognizer, run)
                except Exception as e:
                    raise RecognitionFailed("Failed to start speech recognition") from e

        elif isinstance(event, RecognitionResult):
            if event.is_final and run.transcript.add(event.text):
                logger.info(f"[Orchestrator] 识别片段: {event.text!r}")
                if run.audio_finished:
                    return run.transcript.text

        elif isinstance(event, PlaybackEnded):
            logger.info("[Orchestrator] 播放结束，等待最后的识别片段")
            run.audio_finished = True
            run.grace_generation += 1
            schedule(self.timings.grace_window, _GraceExpired(run.grace_generation))

        elif isinstance(event, _GraceExpired):
            if event.generation == run.grace_generation:
                if run.transcript.is_empty():
                    raise NoSpeechDetected(NO_SPEECH_MESSAGE)
                return run.transcript.text

        elif isinstance(event, PlaybackFailed):
            raise PlaybackError(f"Audio playback failed: {event.message}")

        elif isinstance(event, RecognitionError):
            self._on_recognition_error(event, run, player, recognizer, schedule)

        elif isinstance(event, RecognitionEnded):
            run.recognizer_active = False
            if not run.audio_finished:
                if not run.network_retry_pending:
                    logger.info("[Orchestrator] 识别在播放结束前停止，重新启动")
                    try:
                        self._start_recognizer(recognizer, run)
                    except Exception as e:
                        logger.error(f"[Orchestrator] 重启识别失败: {e}")
            elif run.transcript.is_empty() and not (run.no_speech_retry_pending or run.network_retry_pending):
                raise NoSpeechDetected("Failed to recognize speech. Please try again.")

        elif isinstance(event, _NoSpeechRetryDue):
            run.no_speech_retry_pending = False
            player.rewind()
            self._play(player)

        elif isinstance(event, _NetworkRetryDue):
            run.network_retry_pending = False
            try:
                if not run.recognizer_active:
                    self._start_recognizer(recognizer, run)
                player.play()
            except Exception as e:
                raise RecognitionNetworkError("Failed to restart after network error") from e

        elif isinstance(event, _OverallTimeout):
            if run.transcript.is_empty():
                raise RecognitionTimeout("Recognition timeout - no speech detected")

        return None

    def _on_recognition_error(
        self,
        event: RecognitionError,
        run: _RunState,
        player: AudioPlayer,
        recognizer: SpeechRecognizer,
        schedule,
    ) -> None:
        logger.warning(f"[Orchestrator] 识别错误: {event.kind}")
        timings = self.timings

        if event.kind == "network":
            if run.network_retries >= timings.max_network_retries:
                raise RecognitionNetworkError(NETWORK_FAILURE_MESSAGE)
            run.network_retries += 1
            logger.info(
                f"[Orchestrator] 网络错误，重试 ({run.network_retries}/{timings.max_network_retries})"
            )
            player.pause()
            player.rewind()
            # 重试会重新播放，作废已开启的宽限窗口
            run.audio_finished = False
            run.grace_generation += 1
            if run.recognizer_active:
                self._stop_recognizer(recognizer, run)
            run.network_retry_pending = True
            schedule(timings.network_retry_delay, _NetworkRetryDue())

        elif event.kind == "no-speech":
            if run.no_speech_attempts >= timings.max_no_speech_attempts:
                raise NoSpeechDetected(NO_SPEECH_MESSAGE)
            run.no_speech_attempts += 1
            logger.info(
                f"[Orchestrator] 未检测到语音，重头播放 ({run.no_speech_attempts}/{timings.max_no_speech_attempts})"
            )
            run.transcript.clear()
            player.pause()
            run.no_speech_retry_pending = True
            schedule(timings.no_speech_retry_delay, _NoSpeechRetryDue())

        else:
            raise RecognitionFailed(f"Speech recognition error: {event.kind}", kind=event.kind)

    @staticmethod
    def _start_recognizer(recognizer: SpeechRecognizer, run: _RunState) -> None:
        recognizer.start()
        run.recognizer_active = True

    @staticmethod
    def _stop_recognizer(recognizer: SpeechRecognizer, run: _RunState) -> None:
        run.recognizer_active = False
        try:
            recognizer.stop()
        except Exception as e:
            logger.warning(f"[Orchestrator] 停止识别失败: {e}")

    @staticmethod
    def _play(player: AudioPlayer) -> None:
        try:
            player.play()
        except Exception as e:
            raise PlaybackError("Failed to play audio") from e
