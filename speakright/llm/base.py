"""
LLM 抽象基类
"""
from abc import ABC, abstractmethod


class LLMError(RuntimeError):
    """上游 LLM 调用失败（可重试）"""


class LLMAuthError(LLMError):
    """上游拒绝凭证 (HTTP 401)，不可重试"""


class ChatLLM(ABC):
    """单轮对话 LLM 基类"""

    @abstractmethod
    def chat(self, prompt: str, system: str) -> str:
        """
        发送一次非流式对话请求

        :param prompt: 用户 prompt
        :param system: 系统 prompt
        :return: 模型回复的原始文本
        :raises LLMAuthError: 凭证被拒绝
        :raises LLMError: 其他任何失败
        """
        ...
