"""
结果渲染为 Markdown
"""
from typing import List, Optional

from speakright.models.analysis import AnalysisContent, WordPronunciation


def _word_lines(words: List[WordPronunciation]) -> List[str]:
    if not words:
        return ["- (none)"]
    return [f"- **{w.word}** /{w.ipa}/" if w.ipa else f"- **{w.word}**" for w in words]


def render_markdown(
    content: AnalysisContent,
    spoken_text: str,
    target_text: Optional[str] = None,
) -> str:
    """把分析结果渲染为 Markdown 文本"""
    lines = ["# Pronunciation Analysis", ""]
    if target_text:
        lines += ["## Target", "", target_text, ""]
    if content.ipa:
        lines += ["## IPA", "", f"/{content.ipa.strip('/')}/", ""]

    lines += ["## What You Said", "", spoken_text, ""]
    lines += ["## Well Pronounced", ""] + _word_lines(content.good_pronunciation) + [""]
    lines += ["## Needs Improvement", ""] + _word_lines(content.needs_improvement) + [""]

    if content.tips:
        lines += ["## Tips", ""]
        lines += [f"{i}. {tip}" for i, tip in enumerate(content.tips, 1)]
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
