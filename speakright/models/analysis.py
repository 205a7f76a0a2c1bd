"""
发音分析相关数据模型
"""
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """对外使用 camelCase，对内使用 snake_case"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -------- API 请求 / 响应模型 (Pydantic) --------

class WordPronunciation(_CamelModel):
    """单词及其音标"""
    word: str
    ipa: str = ""


class AnalysisContent(_CamelModel):
    """LLM 返回并经过规范化的分析结果"""
    ipa: str = ""                                                        # 目标句子的 IPA
    good_pronunciation: List[WordPronunciation] = Field(default_factory=list)
    needs_improvement: List[WordPronunciation] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)


class AnalyzeRequest(_CamelModel):
    """分析请求体"""
    target_text: Optional[str] = None                  # 目标句子，可为空
    spoken_text: str = Field(min_length=1)             # 识别出的语音文本

    @field_validator("spoken_text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("spokenText must not be empty")
        return value

    def has_target(self) -> bool:
        return bool(self.target_text and self.target_text.strip())


class AnalyzeResponse(_CamelModel):
    """分析成功的响应"""
    content: AnalysisContent
    target_text: str


class ErrorResponse(BaseModel):
    """失败响应"""
    error: str
    details: str = ""


# -------- 内部数据模型 (dataclass) --------

@dataclass
class AnalysisOutcome:
    """网关产物：规范化结果 + 实际使用的目标句子"""
    content: AnalysisContent
    target_text: str
    attempts: int = 1
