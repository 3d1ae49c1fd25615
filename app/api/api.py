from __future__ import annotations

from fastapi import APIRouter
from app.domains.media_review.router import router as media_review_router

api_router = APIRouter()
api_router.include_router(media_review_router)
