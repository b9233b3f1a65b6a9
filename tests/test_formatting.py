"""Tests for message formatting and text helpers."""

from mathbot.schemas.conversation import ChatTurn
from mathbot.schemas.solve import EssayResult, McqResult
from mathbot.utils.formatting import correct_option_index, format_result, format_turn
from mathbot.utils.text_utils import parse_options, split_message, tail, truncate


def test_correct_option_marked():
    result = McqResult(answer_index=1, answer_text="4", confidence=0.9, explanation="2+2")

    text = format_result(result, ["3", "4"])

    assert "✅ 2) 4" in text
    assert "▫️ 1) 3" in text
    assert "Confidence: 90%" in text
    assert "2+2" in text


def test_out_of_range_index_marks_nothing():
    result = McqResult(answer_index=5, explanation="?")
    assert correct_option_index(result, ["a", "b"]) is None
    assert "✅" not in format_result(result, ["a", "b"])


def test_failed_result_shows_reason_and_no_mark():
    result = McqResult(answer_index=0, fail_reason="No option matches")

    text = format_result(result, ["a"])

    assert text.startswith("⚠️ No option matches")
    assert "✅" not in text
    assert "Confidence" not in text


def test_essay_result():
    text = format_result(EssayResult(answer="x = 3", explanation="subtract 2"))
    assert "x = 3" in text
    assert "subtract 2" in text


def test_format_turn_placeholder():
    assert format_turn(ChatTurn(role="model")) == "…"
    assert format_turn(ChatTurn(role="model", text="hi")) == "hi"


def test_parse_options():
    assert parse_options("3\n 4 \n\n5") == ["3", "4", "5"]
    assert parse_options("a; b;c") == ["a", "b", "c"]


def test_split_message_respects_limit():
    text = "\n\n".join(["word " * 50] * 10)
    chunks = split_message(text, max_length=300)
    assert all(len(c) <= 300 for c in chunks)
    assert split_message("short") == ["short"]


def test_truncate_and_tail():
    assert truncate("a  b   c", 10) == "a b c"
    assert truncate("abcdefghij", 5) == "abcd…"
    assert tail("abcdef", 4) == "…def"
