"""Render results, history entries and transcripts as chat messages."""

from typing import List, Optional, Sequence

from mathbot.schemas.conversation import ChatTurn
from mathbot.schemas.history import HistoryRecord
from mathbot.schemas.solve import EssayResult, McqResult, Mode, SolveResult
from mathbot.utils.text_utils import truncate


def correct_option_index(result: McqResult, options: Sequence[str]) -> Optional[int]:
    """Index of the option to mark correct, or None if undetermined or out of range."""
    if not result.answer_bearing:
        return None
    if 0 <= result.answer_index < len(options):
        return result.answer_index
    return None


def _format_mcq(result: McqResult, options: Sequence[str]) -> List[str]:
    lines = ["📝 *Answer*"]
    marked = correct_option_index(result, options)
    for i, option in enumerate(options):
        prefix = "✅" if i == marked else "▫️"
        lines.append(f"{prefix} {i + 1}) {option}")
    if marked is None:
        if result.answer_text and not result.failed:
            lines.append(f"➡️ {result.answer_text}")
        else:
            lines.append("⚠️ Could not determine the correct answer.")

    details = []
    if result.normalized_expression:
        details.append(f"Expression: `{result.normalized_expression}`")
    if result.value:
        details.append(f"Value: {result.value}")
    if not result.failed:
        details.append(f"Confidence: {round(result.confidence * 100)}%")
    if details:
        lines.append("")
        lines.extend(details)
    return lines


def _format_essay(result: EssayResult) -> List[str]:
    if not result.answer:
        return []
    return ["📝 *Answer*", result.answer]


def format_result(result: SolveResult, options: Sequence[str] = ()) -> str:
    """Full result message; ``options`` are the non-blank options that were sent."""
    lines: List[str] = []
    if result.failed:
        lines.extend([f"⚠️ {result.fail_reason}", ""])

    if result.mode == Mode.MCQ:
        lines.extend(_format_mcq(result, options))
    elif result.mode == Mode.ESSAY:
        lines.extend(_format_essay(result))

    if result.explanation:
        lines.extend(["", "💡 *Explanation*", result.explanation])

    return "\n".join(lines).strip()


def format_history_label(record: HistoryRecord, max_length: int = 40) -> str:
    """Short button label for a history record."""
    tag = "MCQ" if record.mode == Mode.MCQ else "Essay"
    when = record.created_at.strftime("%d %b %H:%M")
    question = record.input.question_text.strip()
    if not question:
        question = "🖼 image" if record.image else "—"
    status = "⚠️ " if record.result.failed else ""
    return f"{status}[{tag}] {when} · {truncate(question, max_length)}"


def format_turn(turn: ChatTurn) -> str:
    """Text of a streamed model turn; a placeholder while still empty."""
    return turn.text or "…"
