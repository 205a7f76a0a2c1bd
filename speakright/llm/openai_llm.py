"""
基于 OpenAI 兼容 API 的对话 LLM
支持 Moonshot / OpenAI / DeepSeek / Ollama 等所有兼容接口

也支持 Anthropic 兼容模式 (需要使用 AnthropicLLM 类)
"""
import logging

import openai
from openai import OpenAI

from speakright.llm.base import ChatLLM, LLMAuthError, LLMError

logger = logging.getLogger(__name__)


class OpenAILLM(ChatLLM):
    """
    通用 OpenAI 兼容 LLM

    通过设置不同的 base_url 支持:
    - Moonshot:    https://api.moonshot.cn/v1
    - OpenAI:      https://api.openai.com/v1
    - DeepSeek:    https://api.deepseek.com/v1
    - Ollama:      http://localhost:11434/v1

    SDK 自带的重试被关闭，重试策略由网关统一负责
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.moonshot.cn/v1",
        model: str = "moonshot-v1-8k",
        temperature: float = 0.3,
        timeout: float = 60.0,
    ):
        self.model = model
        self.temperature = temperature
        self.client = OpenAI(
            api_key=api_key.strip(),
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )
        logger.info(f"[LLM] 初始化完成: model={model}, base_url={base_url}")

    def chat(self, prompt: str, system: str) -> str:
        logger.info(f"[LLM] 发送请求: model={self.model}, prompt_len={len(prompt)}")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                stream=False,
            )
        except openai.AuthenticationError as e:
            raise LLMAuthError("API Authentication failed") from e
        except openai.APIError as e:
            raise LLMError(f"LLM request failed: {e}") from e

        if not response.choices or response.choices[0].message.content is None:
            raise LLMError("LLM returned an empty response")

        content = response.choices[0].message.content.strip()
        logger.info(f"[LLM] 请求完成: output_len={len(content)}")
        return content


class AnthropicLLM(ChatLLM):
    """
    Anthropic SDK 兼容 LLM

    使用方法:
    - base_url: https://api.anthropic.com 或其他 /anthropic 兼容地址
    - model: claude-* / 兼容服务商的模型名

    需要安装: pip install anthropic
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.anthropic.com",
        model: str = "claude-3-5-haiku-latest",
        temperature: float = 0.3,
        timeout: float = 60.0,
    ):
        try:
            import anthropic
        except ImportError:
            raise ImportError("请安装 anthropic SDK: pip install anthropic")

        self._anthropic = anthropic
        self.model = model
        self.temperature = temperature
        self.client = anthropic.Anthropic(
            api_key=api_key.strip(),
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )
        logger.info(f"[AnthropicLLM] 初始化完成: model={model}, base_url={base_url}")

    def chat(self, prompt: str, system: str) -> str:
        logger.info(f"[AnthropicLLM] 发送请求: model={self.model}, prompt_len={len(prompt)}")

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=2048,
                system=system,
                messages=[
                    {"role": "user", "content": [{"type": "text", "text": prompt}]}
                ],
                temperature=self.temperature,
            )
        except self._anthropic.AuthenticationError as e:
            raise LLMAuthError("API Authentication failed") from e
        except self._anthropic.APIError as e:
            raise LLMError(f"LLM request failed: {e}") from e

        # 取第一个文本块
        for block in response.content:
            if block.type == "text":
                content = block.text.strip()
                logger.info(f"[AnthropicLLM] 请求完成: output_len={len(content)}")
                return content

        raise LLMError("LLM returned an empty response")


def create_llm(
    api_key: str,
    base_url: str,
    model: str,
    temperature: float = 0.3,
    timeout: float = 60.0,
) -> ChatLLM:
    """根据 base_url 自动选择:
    - Anthropic 兼容模式 -> AnthropicLLM
    - 其他 OpenAI 兼容 API -> OpenAILLM
    """
    if "anthropic" in base_url:
        return AnthropicLLM(
            api_key=api_key,
            base_url=base_url,
            model=model,
            temperature=temperature,
            timeout=timeout,
        )

    return OpenAILLM(
        api_key=api_key,
        base_url=base_url,
        model=model,
        temperature=temperature,
        timeout=timeout,
    )
