from __future__ import annotations

from typing import Any

from app.core.config import settings
from app.domains.media_review.schema import MediaType, ReviewMode

# 모드와 상관없이 항상 채워야 하는 필드 (ReviewResult 필수 필드와 동일해야 함)
REQUIRED_FIELDS: tuple[str, ...] = (
    "summary",
    "rating",
    "genres",
    "themes",
    "strengths",
    "weaknesses",
    "consensus",
    "detailed_review",
    "spoilers",
)

_SUMMARY_BANDS = {
    ReviewMode.SIMPLE: "Concise synopsis, 80-120 words.",
    ReviewMode.DETAILED: "Thorough synopsis, 150-200 words.",
}


def _string_list(min_items: int, max_items: int, description: str) -> dict[str, Any]:
    return {
        "type": "array",
        "items": {"type": "string"},
        "minItems": min_items,
        "maxItems": max_items,
        "description": description,
    }


# ============================================
# 응답 스키마 (structured output)
# ============================================
def build_response_schema(mode: ReviewMode) -> dict[str, Any]:
    """모든 모드에서 같은 상위 스키마를 쓰고, 모드는 설명 문구만 바꿈"""
    properties: dict[str, Any] = {
        "summary": {"type": "string", "description": _SUMMARY_BANDS[mode]},
        "rating": {
            "type": "string",
            "description": 'Formatted score with its source, e.g. "8.5/10 IMDb".',
        },
        "genres": _string_list(3, 4, "Main genres, most specific first."),
        "themes": _string_list(3, 6, "Central themes."),
        "strengths": _string_list(3, 5, "Concrete strengths."),
        "weaknesses": _string_list(2, 4, "Genuine, specific weaknesses. Never empty."),
        "consensus": {
            "type": "string",
            "description": "One balanced sentence of audience and critic consensus.",
        },
        "detailed_review": {
            "type": "string",
            "description": "One short critical paragraph.",
        },
        "character_insights": _string_list(0, 5, "Short notes on key characters."),
        "spoilers": {
            "type": "string",
            "description": "Ending and major twists. Empty string unless spoilers were requested.",
        },
        "citations": {
            "type": "array",
            "items": {"type": "string", "format": "uri"},
            "maxItems": 6,
            "description": "Source URLs.",
        },
    }
    return {
        "type": "object",
        "additionalProperties": False,
        "properties": properties,
        "required": list(REQUIRED_FIELDS),
    }


def response_format(mode: ReviewMode) -> dict[str, Any]:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "media_review",
            "schema": build_response_schema(mode),
            "strict": True,
        },
    }


# ============================================
# 프롬프트
# ============================================
_BASE_RULES = (
    "You are a candid media critic. "
    "Return only a single JSON object matching the schema. No markdown, no code fences, no commentary. "
    "Every review must list at least one genuine weakness; never claim a work has no flaws. "
    'Use a real published score for "rating" when one exists and name its source.'
)

_MODE_RULES = {
    ReviewMode.SIMPLE: "Keep sentences short and plain. Stay factual and brief.",
    ReviewMode.DETAILED: (
        "Be thorough and critical. Give a balanced critique that weighs real flaws "
        "as seriously as strengths."
    ),
}

_SPOILER_RULES = {
    True: (
        "Put the ending and major twists in \"spoilers\" only. "
        "Keep every other field spoiler-free."
    ),
    False: 'Avoid spoilers everywhere and return an empty string for "spoilers".',
}


def build_system_prompt(mode: ReviewMode, spoiler: bool) -> str:
    return " ".join((_BASE_RULES, _MODE_RULES[mode], _SPOILER_RULES[bool(spoiler)]))


def build_user_prompt(title: str, media_type: MediaType, mode: ReviewMode, spoiler: bool) -> str:
    return (
        f"Title: {title}\n"
        f"Type: {media_type.value}\n"
        f"Mode: {mode.value}\n"
        f"Spoilers: {'yes' if spoiler else 'no'}\n"
        "Provide clean JSON as specified."
    )


def build_messages(
    title: str, media_type: MediaType, mode: ReviewMode, spoiler: bool
) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": build_system_prompt(mode, spoiler)},
        {"role": "user", "content": build_user_prompt(title, media_type, mode, spoiler)},
    ]


def generation_params(mode: ReviewMode) -> dict[str, Any]:
    # simple: 사실 위주라 낮은 temperature, detailed: 길고 비판적인 글
    if mode is ReviewMode.DETAILED:
        return dict(
            temperature=settings.DETAILED_TEMPERATURE,
            max_tokens=settings.DETAILED_MAX_TOKENS,
        )
    return dict(
        temperature=settings.SIMPLE_TEMPERATURE,
        max_tokens=settings.SIMPLE_MAX_TOKENS,
    )
