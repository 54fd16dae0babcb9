from __future__ import annotations

import json

from app.corrections.schemas import rejection_message

_TONE_GUIDANCE = {
    "neutral": "Keep the wording plain and natural, neither stiff nor slangy.",
    "formal": "Use polished, formal wording suitable for professional writing.",
    "casual": "Use relaxed, conversational wording a native speaker would say to a friend.",
}


def build_correction_prompt(*, sentence: str, language: str, tone: str) -> str:
    """
    Create the single prompt sent to the provider.

    - The sentence is embedded as a JSON string literal so quotes inside it cannot
      break out of the instruction block.
    - The model is asked to reject sentences that are not in `language` with the
      same sentinel the server-side guard produces.
    - Output is forced to raw JSON with `corrected`, `explanation`, `alternatives`.
    """

    rejection = {
        "corrected": "",
        "explanation": rejection_message(language),
        "alternatives": [],
    }
    example = {
        "corrected": "the fixed sentence",
        "explanation": "explanation of changes made",
        "alternatives": ["alternative 1", "alternative 2"],
    }

    return "\n".join(
        [
            "You are a helpful language tutor.",
            "",
            f"Task: Correct the following sentence naturally in {language} with a {tone} tone.",
            f"Tone guidance: {_TONE_GUIDANCE.get(tone, '')}",
            "",
            f"Sentence: {json.dumps(sentence, ensure_ascii=False)}",
            "",
            "Instructions:",
            f"1. First, determine if the sentence is written in {language}.",
            f"2. If it is NOT in {language}, respond with ONLY this JSON:",
            json.dumps(rejection, ensure_ascii=False, indent=2),
            f"3. If it IS in {language}, correct it and respond in this exact JSON format:",
            json.dumps(example, ensure_ascii=False, indent=2),
            "4. Give at most 5 alternatives.",
            "",
            "Output requirements:",
            "- Output ONLY raw JSON: no markdown, no backticks, no text before or after it.",
            "- The response must be a single valid JSON object that can be parsed directly.",
        ]
    )
