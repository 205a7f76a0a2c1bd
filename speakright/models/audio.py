"""
音频采集结果数据模型
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class AudioCapture:
    """一段已通过时长校验的音频"""
    data: bytes                     # 原始音频字节
    filename: str                   # 文件名 (recording.wav / 上传文件名)
    duration: float                 # 时长（秒）
    source: str = "upload"          # 来源 (upload / recording)


@dataclass(frozen=True)
class AudioChunk:
    """麦克风采集到的一段 PCM16 数据"""
    pcm16: bytes
    sample_rate: int
    channels: int
    duration: float                 # 秒
