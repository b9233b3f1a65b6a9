"""Text utilities for message processing."""

import re
from typing import List

TELEGRAM_MESSAGE_LIMIT = 4096


def split_message(text: str, max_length: int = TELEGRAM_MESSAGE_LIMIT) -> List[str]:
    """
    Split long message into chunks for Telegram.

    Tries to split at paragraph boundaries, then sentences, then words.
    """
    if len(text) <= max_length:
        return [text]

    chunks = []
    current_chunk = ""

    for para in text.split("\n\n"):
        if len(para) > max_length:
            for sentence in re.split(r"(?<=[.!?])\s+", para):
                if len(sentence) > max_length:
                    # Words as last resort
                    for word in sentence.split():
                        if len(current_chunk) + len(word) + 1 > max_length:
                            if current_chunk:
                                chunks.append(current_chunk.strip())
                            current_chunk = word[:max_length]
                        else:
                            current_chunk += " " + word if current_chunk else word
                elif len(current_chunk) + len(sentence) + 1 > max_length:
                    if current_chunk:
                        chunks.append(current_chunk.strip())
                    current_chunk = sentence
                else:
                    current_chunk += " " + sentence if current_chunk else sentence
        elif len(current_chunk) + len(para) + 2 > max_length:
            if current_chunk:
                chunks.append(current_chunk.strip())
            current_chunk = para
        else:
            current_chunk += "\n\n" + para if current_chunk else para

    if current_chunk:
        chunks.append(current_chunk.strip())

    return chunks


def truncate(text: str, max_length: int) -> str:
    """Shorten text to ``max_length`` characters, ending with an ellipsis."""
    text = " ".join(text.split())
    if len(text) <= max_length:
        return text
    return text[: max_length - 1].rstrip() + "…"


def tail(text: str, max_length: int = TELEGRAM_MESSAGE_LIMIT) -> str:
    """Keep the last ``max_length`` characters; used for live-edited messages."""
    if len(text) <= max_length:
        return text
    return "…" + text[-(max_length - 1):]


def parse_options(text: str) -> List[str]:
    """Split user-entered options, one per line (or separated by ';')."""
    separator = "\n" if "\n" in text else ";"
    return [opt.strip() for opt in text.split(separator) if opt.strip()]


def sanitize_markdown(text: str) -> str:
    """
    Try to fix common Markdown issues.

    - Ensures code blocks are closed
    - Ensures inline code is closed
    - Ensures bold/italic markers are balanced
    """
    if text.count("```") % 2 != 0:
        text += "\n```"

    # Backticks outside code blocks
    if text.replace("```", "").count("`") % 2 != 0:
        text += "`"

    if text.count("**") % 2 != 0:
        text += "**"

    # Single * not part of **
    if text.replace("**", "").count("*") % 2 != 0:
        text += "*"

    return text
