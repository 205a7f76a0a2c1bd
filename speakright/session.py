"""
练习会话状态

所有会话字段集中在 SessionState 中，只能通过 SessionController 的方法变更。
generation 在每次重置 / 替换音频时递增，进行中的分析完成后若发现 generation
已变化，则丢弃结果。
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from speakright.capture.validation import validate_upload
from speakright.client import AnalysisClient
from speakright.models.analysis import AnalysisContent
from speakright.models.audio import AudioCapture
from speakright.recognition.base import AudioPlayer, SpeechRecognizer, SpeechSynthesizer
from speakright.recognition.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


class InputMethod(str, Enum):
    UPLOAD = "upload"
    RECORD = "record"


@dataclass(frozen=True)
class PracticeResult:
    """一次分析的结果"""
    spoken_text: str
    content: AnalysisContent


@dataclass
class SessionState:
    capture: Optional[AudioCapture] = None
    target_text: str = ""
    result: Optional[PracticeResult] = None
    is_analyzing: bool = False
    is_recording: bool = False
    input_method: Optional[InputMethod] = None
    generation: int = 0

    @property
    def has_results(self) -> bool:
        return self.result is not None


PlayerFactory = Callable[[AudioCapture], AudioPlayer]
RecognizerFactory = Callable[[], SpeechRecognizer]


class StaleAnalysis(RuntimeError):
    """分析期间会话已被重置或替换"""


class SessionController:
    """
    会话控制器

    所有状态迁移:
    - accept_upload / finish_recording: 替换音频并清空结果
    - set_target_text: 有结果时需要确认，确认后清空结果
    - speak_target: 朗读目标句的标准发音
    - reset: 一次性清空所有派生字段并取消进行中的分析
    - analyze: 识别 + 网关分析
    """

    def __init__(
        self,
        client: Optional[AnalysisClient] = None,
        orchestrator: Optional[Orchestrator] = None,
        state: Optional[SessionState] = None,
    ):
        self.client = client or AnalysisClient()
        self.orchestrator = orchestrator or Orchestrator()
        self.state = state or SessionState()
        self._task: Optional[asyncio.Task] = None

    # ==================== 采集 ====================

    def accept_upload(self, path, **limits) -> AudioCapture:
        """校验并接收上传文件；校验失败时状态保持不变"""
        capture = validate_upload(path, **limits)
        self._replace_capture(capture)
        self.state.input_method = InputMethod.UPLOAD
        return capture

    def start_recording(self) -> None:
        self.state.is_recording = True
        self.state.input_method = InputMethod.RECORD

    def finish_recording(self, capture: AudioCapture) -> None:
        self.state.is_recording = False
        self._replace_capture(capture)

    def _replace_capture(self, capture: AudioCapture) -> None:
        self._cancel_analysis()
        self.state.generation += 1
        self.state.capture = capture
        self.state.result = None
        self.state.is_analyzing = False
        logger.info(f"[Session] 新音频: {capture.filename} ({capture.duration:.1f}s)")

    # ==================== 目标句 / 重置 ====================

    def set_target_text(self, value: str, confirm: Callable[[], bool] = lambda: True) -> bool:
        """
        修改目标句

        :param confirm: 已有结果时调用，返回 False 则放弃修改
        :return: 是否已修改
        """
        if self.state.has_results:
            if not confirm():
                return False
            self._clear(keep_target=True)
        self.state.target_text = value
        return True

    def speak_target(self, synthesizer: SpeechSynthesizer) -> None:
        """朗读目标句的标准发音，语速略慢"""
        text = self.state.target_text.strip()
        if not text:
            raise ValueError("No target sentence to speak")
        logger.info(f"[Session] 朗读目标句: {text!r}")
        synthesizer.speak(text, lang="en-US", rate=0.8)

    def reset(self, confirm: Callable[[], bool] = lambda: True) -> bool:
        if not confirm():
            return False
        self._clear(keep_target=False)
        logger.info("[Session] 会话已重置")
        return True

    def _clear(self, keep_target: bool) -> None:
        self._cancel_analysis()
        target = self.state.target_text if keep_target else ""
        self.state = SessionState(
            target_text=target,
            input_method=self.state.input_method,
            generation=self.state.generation + 1,
        )

    def _cancel_analysis(self) -> None:
        if self._task is not None and not self._task.done():
            logger.info("[Session] 取消进行中的分析")
            self._task.cancel()
        self._task = None

    # ==================== 分析 ====================

    async def analyze(
        self,
        player_factory: PlayerFactory,
        recognizer_factory: RecognizerFactory,
    ) -> PracticeResult:
        """
        播放当前音频并识别，再请求网关分析

        :raises ValueError: 没有音频
        :raises StaleAnalysis: 分析期间会话被重置
        """
        if self.state.capture is None:
            raise ValueError("No audio to analyze")

        self._cancel_analysis()
        task = asyncio.ensure_future(
            self._run_analysis(self.state.capture, player_factory, recognizer_factory)
        )
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and self._task is not task:
                raise StaleAnalysis("Analysis was cancelled") from None
            raise

    async def _run_analysis(
        self,
        capture: AudioCapture,
        player_factory: PlayerFactory,
        recognizer_factory: RecognizerFactory,
    ) -> PracticeResult:
        generation = self.state.generation
        target = self.state.target_text
        self.state.is_analyzing = True
        try:
            spoken_text = await self.orchestrator.transcribe(
                player_factory(capture), recognizer_factory()
            )
            response = await self.client.analyze(spoken_text=spoken_text, target_text=target)
        finally:
            if self.state.generation == generation:
                self.state.is_analyzing = False

        if self.state.generation != generation:
            raise StaleAnalysis("Session changed during analysis")

        result = PracticeResult(spoken_text=spoken_text, content=response.content)
        if response.target_text and not self.state.target_text:
            self.state.target_text = response.target_text
        self.state.result = result
        logger.info("[Session] 结果已更新")
        return result
