"""Prompt templates and the solve prompt builder."""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from mathbot.schemas.solve import ImageAttachment, Mode, SolveRequest

# code -> display name passed to the model
LANGUAGES: Dict[str, str] = {
    "en": "English",
    "ar": "Arabic (العربية)",
    "ru": "Russian (Русский)",
    "fr": "French (Français)",
    "es": "Spanish (Español)",
    "de": "German (Deutsch)",
    "tr": "Turkish (Türkçe)",
    "ur": "Urdu (اردو)",
}

RTL_LANGUAGES = frozenset({"ar", "ur"})


def language_name(code: str) -> str:
    """Resolve a language code to its display name; unknown codes pass through."""
    return LANGUAGES.get(code, code)


def is_rtl(code: str) -> bool:
    return code in RTL_LANGUAGES


MCQ_NORMALIZATION_RULES = """\
2) Normalize the expression before evaluating it:
- Arabic-Indic digits: ٠١٢٣٤٥٦٧٨٩ → 0123456789
- Arabic decimal separator (٫) → "."; remove the thousands separator (٬).
- Multiplication: × ✕ ∗ · and x (when between two numbers) → "*"
- Division: ÷ ／ ⁄ ∕ → "/"
- Subtraction: − – — ‐ → "-"
- Root: √a → sqrt(a)
- Percent: n% → n/100
- Keep parentheses and exponent notation (^).
- Remove unnecessary whitespace."""

MCQ_PROMPT = """\
Role: arithmetic analyzer that picks the correct answer of a multiple-choice question (MCQ).

1) General constraints:
- Reply with a single JSON object ONLY, following the schema below, with no text outside the JSON.
- Your whole response, including the explanation, MUST be written in: {language}.{image_instruction}

{rules}

3) Evaluation:
- Evaluate the normalized expression. Use "numeric_tolerance" when comparing the value with the options.

4) Output schema (strict):
{{
  "answer_index": <int 0-based, or -1 on failure>,
  "answer_text": "<string taken from options>",
  "normalized_expression": "<string after normalization>",
  "value": "<computed result as string>",
  "confidence": <float 0..1>,
  "explanation": "<detailed step-by-step explanation in the requested language>",
  "fail_reason": "<optional string; present only if answer_index = -1>"
}}

---
Current Task Input:
{task_input}
Current Task Output:
"""

MCQ_IMAGE_INSTRUCTION = (
    "\n- Image input: the user has provided an image. The primary question is in the image. "
    "The 'question_text' field below may be empty or provide additional context. "
    "Your main task is to analyze the image.\n"
)

ESSAY_PROMPT = """\
You are an expert math assistant. Solve the following user question and provide a clear, step-by-step explanation.

Constraints:
1. You MUST respond ONLY with a single JSON object. Do not include any text, markdown, or formatting outside of the JSON structure.
2. Your entire response, including the answer and the explanation, MUST be in the following language: {language}.
{image_instruction}
Output schema (strict):
{{
  "answer": "<the final, complete answer to the user's question>",
  "explanation": "<a detailed, step-by-step explanation of the reasoning and calculations used to arrive at the answer>",
  "fail_reason": "<optional string, only present if the question cannot be answered>"
}}

---
User Question:
{question}

JSON Output:
"""

ESSAY_IMAGE_INSTRUCTION = (
    "\nIMPORTANT: The user has provided an image. The primary question is in the image. "
    "The question text below may be empty or provide additional context. "
    "Your main task is to analyze the image.\n"
)

CHAT_SYSTEM_INSTRUCTIONS: Dict[str, str] = {
    "en": (
        "You are a specialized math problem assistant. Your ONLY purpose is to clarify the "
        "provided explanation for the current math problem. Do not answer any questions outside "
        "this scope, such as 'who are you?' or any general knowledge topics. If asked, politely "
        "state that you are a specialized math assistant and decline to answer. Focus solely on "
        "explaining the solution steps."
    ),
    "ar": (
        "أنت مساعد متخصص في شرح مسائل الرياضيات. مهمتك الوحيدة هي توضيح وشرح الحل المقدم للمسألة "
        "الرياضية الحالية. لا تجب على أي أسئلة خارج هذا النطاق، مثل 'من أنت؟' أو أي مواضيع معرفية "
        "عامة. إذا سُئلت عن ذلك، أجب بأدب أنك مساعد رياضيات متخصص وارفض الإجابة. ركز فقط على شرح "
        "خطوات الحل."
    ),
    "ru": (
        "Ты — специализированный помощник по математическим задачам. Твоя ЕДИНСТВЕННАЯ задача — "
        "пояснять уже данное объяснение решения текущей задачи. Не отвечай на вопросы вне этой "
        "темы, например «кто ты?» или вопросы общего характера. Если спросят, вежливо скажи, что "
        "ты специализированный математический помощник, и откажись отвечать. Сосредоточься только "
        "на шагах решения."
    ),
}


def chat_system_instruction(language: str) -> str:
    """Refusal policy for follow-up chats; defaults to English."""
    return CHAT_SYSTEM_INSTRUCTIONS.get(language, CHAT_SYSTEM_INSTRUCTIONS["en"])


@dataclass(frozen=True)
class PromptPayload:
    """Prompt text plus an optional inline image."""

    text: str
    image: Optional[ImageAttachment] = None

    def parts(self) -> Union[str, List[Dict[str, Any]]]:
        """Message content: bare text, or the image followed by the text."""
        if self.image is None:
            return self.text
        return [
            {"type": "image_url", "image_url": {"url": self.image.data_url}},
            {"type": "text", "text": self.text},
        ]


def build_mcq_prompt(request: SolveRequest, language: str) -> str:
    task_input = {
        "question_text": request.question_text,
        "options": list(request.options),
        "numeric_tolerance": request.numeric_tolerance,
    }
    return MCQ_PROMPT.format(
        language=language_name(language),
        image_instruction=MCQ_IMAGE_INSTRUCTION if request.image else "",
        rules=MCQ_NORMALIZATION_RULES,
        task_input=json.dumps(task_input, ensure_ascii=False, indent=2),
    )


def build_essay_prompt(request: SolveRequest, language: str) -> str:
    return ESSAY_PROMPT.format(
        language=language_name(language),
        image_instruction=ESSAY_IMAGE_INSTRUCTION if request.image else "",
        question=json.dumps(request.question_text, ensure_ascii=False),
    )


def build_prompt(request: SolveRequest, language: str) -> PromptPayload:
    """Build the solve prompt for a request. Pure function of its inputs."""
    request = request.normalized()
    if request.mode == Mode.MCQ:
        text = build_mcq_prompt(request, language)
    else:
        text = build_essay_prompt(request, language)
    return PromptPayload(text=text, image=request.image)
