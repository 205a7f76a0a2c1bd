"""
播放器 / 识别器抽象基类与事件定义

真正的实现（浏览器 audio 元素、Web Speech API 等）在外部，
这里只约定它们向监听者推送的事件
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List


# ==================== 事件 ====================

@dataclass(frozen=True)
class PlaybackStarted:
    pass


@dataclass(frozen=True)
class PlaybackEnded:
    pass


@dataclass(frozen=True)
class PlaybackFailed:
    message: str


@dataclass(frozen=True)
class RecognitionResult:
    text: str
    is_final: bool = True


@dataclass(frozen=True)
class RecognitionError:
    kind: str            # no-speech / network / aborted / ...


@dataclass(frozen=True)
class RecognitionEnded:
    pass


Listener = Callable[[object], None]


class EventSource:
    """简单的监听者列表"""

    def __init__(self):
        self._listeners: List[Listener] = []

    def connect(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def disconnect(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event: object) -> None:
        for listener in list(self._listeners):
            listener(event)


# ==================== 接口 ====================

class AudioPlayer(EventSource, ABC):
    """音频播放句柄，独占于一次分析"""

    @abstractmethod
    async def load(self) -> None:
        """等待音频可以播放，失败时抛出异常"""
        ...

    @abstractmethod
    def play(self) -> None:
        """开始播放；成功后推送 PlaybackStarted"""
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def rewind(self) -> None:
        """回到开头"""
        ...

    @abstractmethod
    def release(self) -> None:
        """释放临时音频资源"""
        ...


class SpeechRecognizer(EventSource, ABC):
    """连续识别会话，只推送最终结果"""

    @abstractmethod
    def start(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...


class SpeechSynthesizer(ABC):
    """文本朗读（浏览器 speechSynthesis 等），用于播放目标句的标准发音"""

    @abstractmethod
    def speak(self, text: str, lang: str = "en-US", rate: float = 0.8) -> None:
        ...
