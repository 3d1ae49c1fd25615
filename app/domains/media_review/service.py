from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

import httpx
import openai
from openai import AsyncOpenAI
from pydantic import ValidationError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from app.core.config import settings
from app.domains.media_review.exceptions import (
    InvalidRequest,
    ReviewError,
    UpstreamCallError,
    UpstreamFormatError,
    UpstreamTimeout,
)
from app.domains.media_review.prompts import (
    build_messages,
    generation_params,
    response_format,
)
from app.domains.media_review.schema import (
    MediaType,
    ReviewMode,
    ReviewRequest,
    ReviewResult,
)

logger = logging.getLogger(__name__)

# 재시도 대상: 연결 실패/타임아웃, 429, 5xx
_TRANSIENT_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


# ============================================
# Mode (pro 플래그가 유일한 게이트)
# ============================================
def resolve_effective_mode(mode: Optional[ReviewMode], pro: bool) -> ReviewMode:
    if mode == ReviewMode.DETAILED and pro is True:
        return ReviewMode.DETAILED
    return ReviewMode.SIMPLE


# ============================================
# 응답 파싱
# ============================================
def _strip_code_fences(raw: str) -> str:
    t = (raw or "").strip()
    m = _FENCE_RE.match(t)
    return m.group(1).strip() if m else t


def parse_review_payload(raw: Optional[str]) -> dict[str, Any]:
    """모델 출력 텍스트를 JSON 객체로 변환. 실패하면 빈 결과 대신 UpstreamFormatError"""
    text = _strip_code_fences(raw or "")
    if not text:
        raise UpstreamFormatError("Model returned an empty response")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("model output is not valid JSON: %.200s", text)
        raise UpstreamFormatError("Model returned invalid JSON") from exc
    if not isinstance(data, dict):
        raise UpstreamFormatError("Model returned JSON that is not an object")
    return data


def as_citation_list(value: Any) -> list[str]:
    # 문자열만 남김 (순서 유지, 중복 제거 안 함)
    if not isinstance(value, (list, tuple)):
        return []
    out: list[str] = []
    for item in value:
        if isinstance(item, str) and item.strip():
            out.append(item.strip())
    return out


def metadata_citations(completion: Any, message: Any) -> list[str]:
    """JSON 본문 밖에 붙어 오는 제공자 citations (message 우선, 없으면 completion)"""
    for source in (message, completion):
        found = as_citation_list(getattr(source, "citations", None))
        if found:
            return found
    return []


def merge_citations(body: list[str], metadata: list[str]) -> Optional[list[str]]:
    # 둘 다 비어 있으면 None -> 응답에서 필드 자체를 생략
    combined = list(body) + list(metadata)
    return combined or None


def build_review_result(data: dict[str, Any], citations: list[str], spoiler: bool) -> ReviewResult:
    extras = sorted(set(data) - set(ReviewResult.model_fields))
    if extras:
        logger.warning("dropping fields outside the response schema: %s", ", ".join(extras))

    body = dict(data)
    body_citations = as_citation_list(body.pop("citations", None))

    try:
        result = ReviewResult.model_validate(body)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        logger.warning("model output failed validation: %s", fields)
        raise UpstreamFormatError(
            "Model response is missing or has invalid fields: " + ", ".join(fields)
        ) from exc

    if spoiler and not result.spoilers.strip():
        logger.warning("spoilers requested but model returned none")
        raise UpstreamFormatError("Model response is missing or has invalid fields: spoilers")

    update: dict[str, Any] = {"citations": merge_citations(body_citations, citations)}
    if not spoiler:
        update["spoilers"] = ""
    return result.model_copy(update=update)


# ============================================
# Domain Service
# ============================================
class MediaReviewService:
    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        *,
        max_attempts: Optional[int] = None,
        retry_wait_max: Optional[float] = None,
    ) -> None:
        self._client = client
        self._timeout = httpx.Timeout(
            connect=settings.HTTP_CONNECT_TIMEOUT,
            read=settings.HTTP_READ_TIMEOUT,
            write=settings.HTTP_READ_TIMEOUT,
            pool=settings.HTTP_CONNECT_TIMEOUT,
        )
        attempts = settings.UPSTREAM_MAX_ATTEMPTS if max_attempts is None else max_attempts
        self._max_attempts = max(1, attempts)
        self._retry_wait_max = (
            settings.UPSTREAM_RETRY_WAIT_MAX if retry_wait_max is None else retry_wait_max
        )

    def _get_client(self) -> AsyncOpenAI:
        """OpenAI 호환 클라이언트를 첫 호출 때 1회만 생성 (SDK 자체 재시도는 끔)"""
        if self._client is None:
            if not settings.LLM_API_KEY:
                raise UpstreamCallError("LLM API key is not configured")
            self._client = AsyncOpenAI(
                api_key=settings.LLM_API_KEY,
                base_url=settings.LLM_BASE_URL,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._client

    # ---------- Validation ----------
    def _validate_request(self, req: ReviewRequest) -> tuple[str, MediaType]:
        title = (req.title or "").strip()
        if not title or req.type is None:
            raise InvalidRequest("Missing title or type")
        if len(title) > settings.MAX_TITLE_LEN:
            raise InvalidRequest(f"title too long (max {settings.MAX_TITLE_LEN})")
        return title, req.type

    # ---------- Upstream ----------
    async def _complete(self, **kwargs: Any) -> Any:
        client = self._get_client()

        @retry(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_random_exponential(multiplier=0.5, max=self._retry_wait_max),
            retry=retry_if_exception_type(_TRANSIENT_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async def _call() -> Any:
            return await client.chat.completions.create(**kwargs)

        try:
            return await _call()
        except openai.APITimeoutError as exc:
            logger.error("LLM provider timed out (attempts=%d)", self._max_attempts)
            raise UpstreamTimeout(
                f"LLM provider timed out after {self._max_attempts} attempt(s)"
            ) from exc
        except openai.APIError as exc:
            logger.error("LLM provider call failed: %s", exc)
            raise UpstreamCallError(exc.message) from exc

    def _shape_result(self, completion: Any, spoiler: bool) -> ReviewResult:
        choices = getattr(completion, "choices", None) or []
        if not choices:
            raise UpstreamFormatError("Model returned no choices")
        message = choices[0].message

        data = parse_review_payload(getattr(message, "content", None))
        return build_review_result(data, metadata_citations(completion, message), spoiler)

    # 최종 응답 조합
    async def generate(self, req: ReviewRequest) -> ReviewResult:
        # 1) validate
        title, media_type = self._validate_request(req)

        # 2) pro 플래그로 실제 모드 결정
        mode = resolve_effective_mode(req.mode, req.pro)
        logger.info(
            "generate review title=%r type=%s mode=%s spoiler=%s",
            title, media_type.value, mode.value, req.spoiler,
        )

        # 3) LLM 호출 + 파싱 (예상 못 한 오류도 여기서 ReviewError로 변환)
        try:
            completion = await self._complete(
                model=settings.LLM_MODEL,
                messages=build_messages(title, media_type, mode, req.spoiler),
                response_format=response_format(mode),
                **generation_params(mode),
            )
            return self._shape_result(completion, spoiler=req.spoiler)
        except ReviewError:
            raise
        except Exception as exc:
            logger.exception("unexpected failure while generating review")
            raise UpstreamCallError(str(exc)) from exc
