from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, StrictStr, field_validator, model_validator

Language = Literal["English", "Spanish"]
Tone = Literal["neutral", "formal", "casual"]

SUPPORTED_LANGUAGES: tuple[str, ...] = ("English", "Spanish")
SUPPORTED_TONES: tuple[str, ...] = ("neutral", "formal", "casual")

MAX_ALTERNATIVES = 5


def rejection_message(language: str) -> str:
    return f"Your sentence doesn't look like {language}. Please try again."


class CorrectionRequest(BaseModel):
    """Inbound body for POST /api/improve."""

    sentence: StrictStr = Field(
        description="Sentence to correct. Must be non-empty after trimming whitespace.",
        examples=["I has a apple."],
    )
    language: Language = Field(
        default="English",
        description="Language the sentence is written in (and should be corrected in).",
    )
    tone: Tone = Field(default="neutral", description="Desired tone of the correction.")

    @field_validator("sentence")
    @classmethod
    def _sentence_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Sentence is required")
        return value


class CorrectionResult(BaseModel):
    """
    Canonical response shape.

    Either a valid correction (non-empty `corrected` and `explanation`) or the
    rejection sentinel built by `rejection()`.
    """

    corrected: str = Field(
        description="Corrected sentence. Empty string when the sentence was rejected.",
        examples=["I have an apple."],
    )
    explanation: str = Field(
        description="What changed and why, or the language-mismatch message.",
        examples=["'has' becomes 'have' after 'I'; 'a' becomes 'an' before a vowel."],
    )
    alternatives: list[str] = Field(
        default_factory=list,
        max_length=MAX_ALTERNATIVES,
        description="Up to five alternative phrasings.",
        examples=[["I've got an apple."]],
    )

    @classmethod
    def rejection(cls, language: str) -> CorrectionResult:
        return cls(corrected="", explanation=rejection_message(language), alternatives=[])

    @property
    def is_rejection(self) -> bool:
        return self.corrected == ""


class ErrorOut(BaseModel):
    error: str = Field(examples=["Invalid AI response"])


class _ProviderReply(BaseModel):
    """
    Internal schema for the JSON object parsed out of the provider text.

    Text fields are strict; `alternatives` is cleaned up rather than rejected.
    An empty `corrected` is the model rejecting the sentence, which needs no explanation.
    """

    corrected: StrictStr
    explanation: StrictStr = ""
    alternatives: list[str] = Field(default_factory=list)

    @field_validator("alternatives", mode="before")
    @classmethod
    def _clean_alternatives(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        cleaned = [item for item in value if isinstance(item, str) and item.strip()]
        return cleaned[:MAX_ALTERNATIVES]

    @model_validator(mode="after")
    def _explanation_required_for_corrections(self) -> _ProviderReply:
        if self.corrected.strip() and not self.explanation.strip():
            raise ValueError("'explanation' must be a non-empty string")
        return self
