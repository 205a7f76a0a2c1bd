"""
上传音频校验
扩展名白名单 + 时长上限（默认 30 秒）
"""
import logging
from pathlib import Path
from typing import Optional

from pydub import AudioSegment

from speakright.config import settings
from speakright.models.audio import AudioCapture

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".mp3", ".m4a", ".wav")


class CaptureError(ValueError):
    """音频无法读取或不符合要求"""


class CaptureRejected(CaptureError):
    """音频超过时长上限"""

    def __init__(self, message: str, duration: float):
        super().__init__(message)
        self.duration = duration


def too_long_message(duration: float, max_seconds: float, contact_email: str) -> str:
    return (
        f"This audio file is {round(duration)} seconds long.\n\n"
        f"Free tier is limited to {int(max_seconds)} seconds.\n\n"
        f"For longer recordings, please contact {contact_email} for sponsorship options."
    )


def recording_limit_message(max_seconds: float, contact_email: str) -> str:
    return (
        f"Recording stopped at {int(max_seconds)} seconds.\n\n"
        f"For longer recordings, please contact {contact_email} for sponsorship options."
    )


def measure_duration(path: Path) -> float:
    """用 pydub 读取音频并返回时长（秒）"""
    try:
        segment = AudioSegment.from_file(str(path), format=path.suffix.lstrip(".").lower() or None)
    except Exception as e:
        logger.warning(f"[Capture] 音频读取失败: {path}, error={e}")
        raise CaptureError(
            "Failed to process audio file. Please try again with a different file."
        ) from e
    return len(segment) / 1000.0


def check_duration(
    duration: float,
    max_seconds: Optional[float] = None,
    contact_email: Optional[str] = None,
) -> None:
    """时长超过上限时抛出 CaptureRejected"""
    max_seconds = settings.max_audio_seconds if max_seconds is None else max_seconds
    if duration > max_seconds:
        raise CaptureRejected(
            too_long_message(duration, max_seconds, contact_email or settings.contact_email),
            duration=duration,
        )


def validate_upload(
    path,
    max_seconds: Optional[float] = None,
    contact_email: Optional[str] = None,
) -> AudioCapture:
    """
    校验上传的音频文件

    :param path: 本地音频文件路径
    :param max_seconds: 时长上限，默认取配置
    :param contact_email: 超时提示中的联系邮箱
    :return: AudioCapture
    :raises CaptureError: 扩展名不支持或文件无法读取
    :raises CaptureRejected: 时长超过上限
    """
    path = Path(path)
    if path.suffix.lower() not in ALLOWED_EXTENSIONS:
        raise CaptureError(
            f"Unsupported audio format '{path.suffix}'. "
            f"Please upload one of: {', '.join(ALLOWED_EXTENSIONS)}"
        )
    if not path.is_file():
        raise CaptureError(f"Audio file not found: {path}")

    duration = measure_duration(path)
    logger.info(f"[Capture] 音频时长: {duration:.2f}s ({path.name})")
    check_duration(duration, max_seconds, contact_email)

    return AudioCapture(
        data=path.read_bytes(),
        filename=path.name,
        duration=duration,
        source="upload",
    )
