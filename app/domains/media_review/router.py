from __future__ import annotations

from fastapi import APIRouter

from app.domains.media_review.schema import (
    ErrorResponse,
    ReviewRequest,
    ReviewResult,
)
from app.domains.media_review.service import MediaReviewService

router = APIRouter(tags=["media-review"])

_service = MediaReviewService()


@router.post(
    "/api/generate-review",
    response_model=ReviewResult,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_review(req: ReviewRequest) -> ReviewResult:
    return await _service.generate(req)
