"""Utils module for MathBot."""

from mathbot.utils.prompts import build_prompt, chat_system_instruction
from mathbot.utils.text_utils import split_message

__all__ = [
    "build_prompt",
    "chat_system_instruction",
    "split_message",
]
