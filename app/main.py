from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.api import api_router
from app.core.logging_config import setup_logging
from app.domains.media_review.exceptions import GENERIC_ERROR_MESSAGE, ReviewError

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "invalid value")
    return f"Invalid request: {loc}: {msg}" if loc else f"Invalid request: {msg}"


# FastAPI 앱을 생성하고(title/version 설정), 라우터를 붙이고,
# /health와 {"error": ...} 형태의 오류 핸들러를 추가한 뒤, uvicorn이 인식할 app 객체를 노출
def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(title="ai-media-review", version="0.1.0")
    app.include_router(api_router)

    @app.exception_handler(ReviewError)
    async def handle_review_error(request: Request, exc: ReviewError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    # pydantic 검증 실패도 422 대신 400 + {"error": ...}
    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    # 그 밖의 예외도 평문 500 대신 {"error": ...}
    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error in %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})

    @app.get("/health")
    def health():
        return {"status": "OK"}

    return app


app = create_app()
