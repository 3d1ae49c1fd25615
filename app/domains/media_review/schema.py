from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator


class MediaType(str, Enum):
    BOOK = "book"
    MANGA = "manga"
    MOVIE = "movie"
    TV = "tv"


class ReviewMode(str, Enum):
    SIMPLE = "simple"
    DETAILED = "detailed"


# -------------------------
# Inputs
# -------------------------
class ReviewRequest(BaseModel):
    # title/type 누락은 서비스에서 400 "Missing title or type"으로 처리 (422 아님)
    title: Optional[str] = None
    type: Optional[MediaType] = None
    mode: ReviewMode = ReviewMode.SIMPLE
    # "yes", 1 같은 값이 True로 바뀌지 않도록 strict
    pro: StrictBool = False  # 임시 플래그 (실제 권한 확인 없음)
    spoiler: StrictBool = False

    @field_validator("type", mode="before")
    @classmethod
    def _blank_type_is_missing(cls, v):
        # 빈 문자열 type도 누락으로 취급
        if isinstance(v, str) and not v.strip():
            return None
        return v


# -------------------------
# Generate Review (result)
# -------------------------
class ReviewResult(BaseModel):
    # 스키마 밖 필드는 버림 (service에서 경고 로그)
    model_config = ConfigDict(extra="ignore")

    summary: str = Field(..., min_length=1)
    rating: str
    genres: list[str]
    themes: list[str]
    strengths: list[str]
    weaknesses: list[str] = Field(..., min_length=2)
    consensus: str
    detailed_review: str
    spoilers: str
    character_insights: Optional[list[str]] = None
    citations: Optional[list[str]] = None


class ErrorResponse(BaseModel):
    error: str
