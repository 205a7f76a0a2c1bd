"""
语音识别结果数据模型
"""
from dataclasses import dataclass, field
from typing import List


@dataclass
class Transcript:
    """按顺序累积的识别片段"""
    segments: List[str] = field(default_factory=list)

    def add(self, text: str) -> bool:
        """追加一个最终片段，空白片段会被丢弃"""
        cleaned = text.strip().lower()
        if not cleaned:
            return False
        self.segments.append(cleaned)
        return True

    def clear(self) -> None:
        self.segments.clear()

    def is_empty(self) -> bool:
        return not self.segments

    @property
    def text(self) -> str:
        return " ".join(self.segments).strip()
