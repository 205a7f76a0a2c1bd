from __future__ import annotations

import pytest

from speakright.llm.parsing import extract_json_object, normalize_analysis, parse_analysis_reply

BARE = '{"ipa": "ðə kwɪk", "goodPronunciation": [{"word": "the", "ipa": "ðə"}], "needsImprovement": [], "tips": ["Relax"]}'


def test_extract_json_object_from_surrounding_prose() -> None:
    wrapped = f"Sure! Here is the analysis:\n{BARE}\nLet me know if you need more."
    assert extract_json_object(wrapped) == BARE


def test_wrapped_reply_parses_like_bare_reply() -> None:
    wrapped = f"```json\n{BARE}\n```  Hope this helps {{not json}}"
    assert parse_analysis_reply(wrapped) == parse_analysis_reply(BARE)


def test_extract_json_object_ignores_braces_inside_strings() -> None:
    text = 'x {"tips": ["use } and { carefully"], "ipa": "a"} trailing }'
    assert extract_json_object(text) == '{"tips": ["use } and { carefully"], "ipa": "a"}'


def test_extract_json_object_returns_none_without_object() -> None:
    assert extract_json_object("no json here") is None
    assert extract_json_object('{"ipa": "unterminated"') is None


def test_parse_analysis_reply_without_json_raises() -> None:
    with pytest.raises(ValueError, match="No JSON object"):
        parse_analysis_reply("I could not analyze this.")


def test_parse_analysis_reply_repairs_trailing_commas() -> None:
    content = parse_analysis_reply('{"ipa": "a", "tips": ["one", "two",],}')
    assert content.tips == ["one", "two"]


def test_parse_analysis_reply_invalid_json_raises() -> None:
    with pytest.raises(ValueError, match="Invalid JSON"):
        parse_analysis_reply('{"ipa": nope}')


def test_scenario_scalar_tips_and_empty_good_list() -> None:
    reply = (
        'I think this is: {"ipa":"...", "goodPronunciation":[], '
        '"needsImprovement":[{"word":"quick","ipa":"kwɪk"}], "tips":"slow down"}'
    )
    content = parse_analysis_reply(reply)
    assert content.tips == ["slow down"]
    assert content.good_pronunciation == []
    assert content.needs_improvement[0].word == "quick"
    assert content.needs_improvement[0].ipa == "kwɪk"


def test_normalize_fills_missing_fields() -> None:
    assert normalize_analysis({}) == {
        "ipa": "",
        "goodPronunciation": [],
        "needsImprovement": [],
        "tips": [],
    }


def test_normalize_coerces_word_entries() -> None:
    data = {"goodPronunciation": ["fox", {"word": "brown"}, 42, {"ipa": "x"}], "needsImprovement": "quick"}
    normalized = normalize_analysis(data)
    assert normalized["goodPronunciation"] == [
        {"word": "fox", "ipa": ""},
        {"word": "brown", "ipa": ""},
    ]
    assert normalized["needsImprovement"] == []


def test_normalize_is_idempotent() -> None:
    raw = {
        "ipa": "kwɪk",
        "goodPronunciation": [{"word": "the", "ipa": "ðə"}, "fox"],
        "tips": "slow down",
    }
    once = normalize_analysis(raw)
    twice = normalize_analysis(once)
    assert once == twice
    assert twice["tips"] == ["slow down"]
