from __future__ import annotations

GENERIC_ERROR_MESSAGE = "Unknown error"


class ReviewError(Exception):
    """리뷰 생성 중 발생하는 오류의 기본 클래스 ({"error": message} 응답으로 변환됨)"""

    status_code: int = 500

    def __init__(self, message: str | None = None) -> None:
        self.message = message or GENERIC_ERROR_MESSAGE
        super().__init__(self.message)


class InvalidRequest(ReviewError):
    # 필수 입력 누락/형식 오류 -> 업스트림 호출 없음
    status_code = 400


class UpstreamCallError(ReviewError):
    # 네트워크/제공자 오류
    status_code = 500


class UpstreamTimeout(UpstreamCallError):
    pass


class UpstreamFormatError(ReviewError):
    # JSON 파싱 실패 또는 필수 필드 누락
    status_code = 500
