"""
LLM 回复解析与修复

模型偶尔会在 JSON 前后附带说明文字，这里负责:
  1. 找出第一个完整的顶层 {...} 对象
  2. 解析失败时去掉尾随逗号再试一次
  3. 把结果规范化为固定的四字段结构
"""
import json
import re
from typing import Any, Optional

from speakright.models.analysis import AnalysisContent

_TRAILING_COMMA = re.compile(r",\s*([}\]])")

LIST_FIELDS = ("goodPronunciation", "needsImprovement")


def extract_json_object(text: str) -> Optional[str]:
    """返回文本中第一个括号平衡的顶层 JSON 对象，找不到时返回 None"""
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]

    # 对象没有闭合
    return None


def _normalize_word(item: Any) -> Optional[dict]:
    if isinstance(item, dict):
        word = item.get("word")
        if word is None:
            return None
        ipa = item.get("ipa")
        return {"word": str(word), "ipa": "" if ipa is None else str(ipa)}
    if isinstance(item, str) and item.strip():
        return {"word": item, "ipa": ""}
    return None


def normalize_analysis(data: dict) -> dict:
    """
    规范化分析结果

    - 缺失或非列表的单词字段 -> []
    - 标量 tips -> 单元素列表，空值 -> []
    - 缺失的 ipa -> ""

    对已规范化的数据再次调用结果不变
    """
    result: dict = {"ipa": "" if not data.get("ipa") else str(data["ipa"])}

    for key in LIST_FIELDS:
        value = data.get(key)
        words = []
        if isinstance(value, list):
            for item in value:
                normalized = _normalize_word(item)
                if normalized is not None:
                    words.append(normalized)
        result[key] = words

    tips = data.get("tips")
    if isinstance(tips, list):
        result["tips"] = [str(tip) for tip in tips if tip not in (None, "")]
    elif tips:
        result["tips"] = [str(tips)]
    else:
        result["tips"] = []

    return result


def parse_analysis_reply(reply: str) -> AnalysisContent:
    """
    从模型原始回复中解析出 AnalysisContent

    :raises ValueError: 找不到 JSON 对象或 JSON 无法解析
    """
    json_string = extract_json_object(reply)
    if json_string is None:
        raise ValueError("No JSON object found in response")

    try:
        data = json.loads(json_string)
    except json.JSONDecodeError:
        repaired = _TRAILING_COMMA.sub(r"\1", json_string)
        try:
            data = json.loads(repaired)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in response: {e}") from e

    return AnalysisContent.model_validate(normalize_analysis(data))
