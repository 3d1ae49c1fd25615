from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Optional

import httpx

from app.domains.media_review.schema import MediaType, ReviewMode

logger = logging.getLogger(__name__)

GENERATE_REVIEW_PATH = "/api/generate-review"

# 화면 섹션별로 보여줄 결과 필드
_SYNOPSIS_FIELDS = ("summary",)
_REVIEW_FIELDS = ("rating", "strengths", "weaknesses", "detailed_review")
_ALWAYS_FIELDS = ("genres", "themes", "consensus", "character_insights", "citations")


class ClientState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


class ReviewClient:
    """단일 페이지 UI의 요청 상태 머신 (idle -> submitting -> success/error).

    한 번에 요청 하나만 보냄. 토글 값(show_review, spoiler_mode)은 제출 시점에
    요청 본문의 mode/spoiler로 직렬화됨.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        pro: bool = False,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 90.0,
    ) -> None:
        if http_client is None:
            http_client = httpx.Client(base_url=base_url, timeout=timeout)
        self._http = http_client
        self.pro = pro

        self.state = ClientState.IDLE
        self.title = ""
        self.type = MediaType.MANGA
        self.result: Optional[dict[str, Any]] = None
        self.error: Optional[str] = None

        self.show_review = False
        self.show_synopsis = True
        self.spoiler_mode = False

    @property
    def loading(self) -> bool:
        return self.state is ClientState.SUBMITTING

    # ---------- Toggles ----------
    def enable_spoiler_mode(self, confirm: Callable[[], bool]) -> bool:
        """사용자 확인(yes/no)을 받아야만 스포일러 모드가 켜짐"""
        if self.spoiler_mode:
            return True
        if confirm():
            self.spoiler_mode = True
        return self.spoiler_mode

    def disable_spoiler_mode(self) -> None:
        # 끌 때는 확인 없이 즉시
        self.spoiler_mode = False

    # ---------- Lifecycle ----------
    def build_payload(self, title: str, media_type: MediaType) -> dict[str, Any]:
        mode = ReviewMode.DETAILED if self.show_review else ReviewMode.SIMPLE
        return {
            "title": title,
            "type": media_type.value,
            "mode": mode.value,
            "pro": self.pro,
            "spoiler": self.spoiler_mode,
        }

    def submit(self, title: str, media_type: MediaType | str = MediaType.MANGA) -> ClientState:
        # 빈 제목이거나 이미 요청 중이면 무시
        if not (title or "").strip() or self.loading:
            return self.state

        media_type = MediaType(media_type)
        self.title = title
        self.type = media_type
        self.result = None
        self.error = None
        self.state = ClientState.SUBMITTING

        try:
            res = self._http.post(GENERATE_REVIEW_PATH, json=self.build_payload(title, media_type))
        except httpx.HTTPError as exc:
            logger.warning("review request failed: %s", exc)
            return self._fail(str(exc) or "Request failed")

        try:
            body = res.json()
        except ValueError:
            # 프록시 HTML 502 등 JSON이 아닌 본문
            logger.warning("undecodable response body (status=%d)", res.status_code)
            return self._fail("Request failed")

        if not res.is_success:
            message = body.get("error") if isinstance(body, dict) else None
            return self._fail(message or "Request failed")

        if not isinstance(body, dict):
            return self._fail("Request failed")

        # 결과에 제목이 없을 수 있으니 요청 값으로 덮어씀
        self.result = {**body, "title": title, "type": media_type.value}
        self.state = ClientState.SUCCESS
        return self.state

    def _fail(self, message: str) -> ClientState:
        self.result = None
        self.error = message
        self.state = ClientState.ERROR
        return self.state

    def reset(self) -> ClientState:
        self.title = ""
        self.type = MediaType.MANGA
        self.result = None
        self.error = None
        self.show_review = False
        self.show_synopsis = True
        self.spoiler_mode = False
        self.state = ClientState.IDLE
        return self.state

    # ---------- Rendering ----------
    def visible_sections(self) -> dict[str, Any]:
        """현재 토글 기준으로 화면에 그릴 결과 필드만 추림"""
        if self.state is not ClientState.SUCCESS or not self.result:
            return {}

        fields: list[str] = ["title", "type"]
        if self.show_synopsis:
            fields.extend(_SYNOPSIS_FIELDS)
        if self.show_review:
            fields.extend(_REVIEW_FIELDS)
        fields.extend(_ALWAYS_FIELDS)
        if self.spoiler_mode:
            fields.append("spoilers")

        return {f: self.result[f] for f in fields if self.result.get(f)}

    def close(self) -> None:
        self._http.close()
