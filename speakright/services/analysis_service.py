"""
发音分析网关
编排整个流程: (补全目标句) → LLM 分析 → 解析修复 → 规范化
"""
import logging
import time
from typing import Optional

from speakright.config import Settings, settings as default_settings
from speakright.llm.base import ChatLLM, LLMAuthError, LLMError
from speakright.llm.openai_llm import create_llm
from speakright.llm.parsing import parse_analysis_reply
from speakright.llm.prompts import (
    SYSTEM_PROMPT,
    TARGET_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_target_prompt,
)
from speakright.models.analysis import AnalysisOutcome

logger = logging.getLogger(__name__)


class TargetCompletionError(RuntimeError):
    """无法从语音文本补全目标句"""


class AnalysisFailedError(RuntimeError):
    """重试耗尽或凭证被拒绝"""


class AnalysisService:
    """
    发音分析服务

    流程:
    1. 目标句为空时，先让 LLM 根据识别文本还原最可能的句子（失败即整体失败）
    2. 让 LLM 以 JSON 对比目标句与识别文本
    3. 从回复中提取 JSON 并规范化

    重试: 最多 max_retries 次；401 立即终止
    """

    def __init__(
        self,
        llm: Optional[ChatLLM] = None,
        config: Optional[Settings] = None,
    ):
        self.config = config or default_settings
        self.llm: ChatLLM = llm or create_llm(
            api_key=self.config.llm_api_key,
            base_url=self.config.llm_base_url,
            model=self.config.llm_model,
            temperature=self.config.llm_temperature,
            timeout=self.config.llm_timeout,
        )
        self.max_retries = max(1, self.config.llm_max_retries)
        self.retry_delay = self.config.llm_retry_delay
        logger.info(
            f"[Gateway] 初始化完成: model={self.config.llm_model}, "
            f"max_retries={self.max_retries}"
        )

    # ==================== 核心流程 ====================

    def analyze(self, spoken_text: str, target_text: Optional[str] = None) -> AnalysisOutcome:
        """
        主流程入口: 识别文本 (+ 目标句) → 结构化发音反馈

        :param spoken_text: 识别出的语音文本
        :param target_text: 目标句子，为空时由 LLM 补全
        :return: AnalysisOutcome
        """
        logger.info(f"[Gateway] 开始分析: target={target_text!r}, spoken={spoken_text!r}")

        final_target = (target_text or "").strip() or self.complete_target_text(spoken_text)
        logger.info(f"[Gateway] 使用目标句: {final_target!r}")

        prompt = build_analysis_prompt(final_target, spoken_text)
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            logger.info(f"[Gateway] 第 {attempt}/{self.max_retries} 次尝试")
            try:
                reply = self.llm.chat(prompt, system=SYSTEM_PROMPT)
                logger.debug(f"[Gateway] 原始回复 (attempt {attempt}): {reply}")
                content = parse_analysis_reply(reply)
            except LLMAuthError as e:
                logger.error(f"[Gateway] 凭证被拒绝，不再重试: {e}")
                last_error = e
                break
            except (LLMError, ValueError) as e:
                logger.warning(f"[Gateway] 第 {attempt} 次尝试失败: {e}")
                last_error = e
                if attempt < self.max_retries and self.retry_delay > 0:
                    time.sleep(self.retry_delay)
                continue

            logger.info(
                f"[Gateway] 分析完成: good={len(content.good_pronunciation)}, "
                f"improve={len(content.needs_improvement)}, tips={len(content.tips)}"
            )
            return AnalysisOutcome(content=content, target_text=final_target, attempts=attempt)

        logger.error("[Gateway] 所有尝试均失败")
        raise AnalysisFailedError(str(last_error) if last_error else "Unknown error")

    def complete_target_text(self, spoken_text: str) -> str:
        """根据识别文本让 LLM 还原最可能的目标句，只尝试一次"""
        logger.info("[Gateway] 目标句为空，开始补全...")
        try:
            completed = self.llm.chat(build_target_prompt(spoken_text), system=TARGET_SYSTEM_PROMPT)
        except LLMError as e:
            logger.error(f"[Gateway] 目标句补全失败: {e}")
            raise TargetCompletionError("Failed to generate target text") from e

        completed = completed.strip().strip('"').strip()
        if not completed:
            raise TargetCompletionError("Failed to generate target text")

        logger.info(f"[Gateway] 补全目标句: {completed!r}")
        return completed
