"""
Prompt 模板模块
定义系统 prompt、目标句补全 prompt 与发音分析 prompt
"""

# ==================== 系统 Prompt ====================

SYSTEM_PROMPT = (
    "You are a pronunciation assistant. You must answer with a single JSON object only. "
    "Do not add any other text, comments or code fences. "
    "Make sure the JSON is complete and valid."
)

# 目标句补全只需要纯文本
TARGET_SYSTEM_PROMPT = (
    "You are a helpful English assistant. Answer with the requested sentence only."
)


# ==================== 用户 Prompt 模板 ====================

TARGET_PROMPT_TEMPLATE = """Given this transcribed speech: "{spoken_text}"

Please identify and return the most likely intended sentence in clear, correct English.
Return only the corrected sentence, nothing else."""


ANALYSIS_PROMPT_TEMPLATE = """As an English pronunciation expert, analyze these two texts:
Target: "{target_text}"
Spoken: "{spoken_text}"

Respond with a JSON object using exactly this format:
{{
  "ipa": "IPA transcription of target text",
  "goodPronunciation": [{{"word": "example", "ipa": "ɪɡˈzæmpəl"}}],
  "needsImprovement": [{{"word": "example", "ipa": "correct_ipa"}}],
  "tips": ["Tip 1", "Tip 2"]
}}"""


def build_target_prompt(spoken_text: str) -> str:
    """组装目标句补全 prompt"""
    return TARGET_PROMPT_TEMPLATE.format(spoken_text=spoken_text.strip())


def build_analysis_prompt(target_text: str, spoken_text: str) -> str:
    """
    组装发音分析 prompt

    :param target_text: 目标句子
    :param spoken_text: 识别出的语音文本
    :return: 完整的用户 prompt
    """
    return ANALYSIS_PROMPT_TEMPLATE.format(
        target_text=target_text.strip(),
        spoken_text=spoken_text.strip(),
    )
