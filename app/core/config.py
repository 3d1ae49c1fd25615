from __future__ import annotations

import os

from dotenv import load_dotenv

# 로컬 개발에서는 .env 값을 환경변수로 올림 (이미 있는 값은 덮어쓰지 않음)
load_dotenv()


def _int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except Exception:
        return default


def _float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except Exception:
        return default


class Settings:
    # OpenAI 호환 LLM 제공자 (기본: Perplexity)
    LLM_API_KEY: str = os.getenv("PERPLEXITY_API_KEY", "")
    LLM_BASE_URL: str = os.getenv("LLM_BASE_URL", "https://api.perplexity.ai")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "sonar-pro")

    # http client timeout (seconds)
    HTTP_CONNECT_TIMEOUT: float = _float("HTTP_CONNECT_TIMEOUT", 5.0)
    HTTP_READ_TIMEOUT: float = _float("HTTP_READ_TIMEOUT", 60.0)

    # 업스트림 재시도 (1 = 재시도 없음, 요청당 호출 1회)
    UPSTREAM_MAX_ATTEMPTS: int = _int("UPSTREAM_MAX_ATTEMPTS", 1)
    UPSTREAM_RETRY_WAIT_MAX: float = _float("UPSTREAM_RETRY_WAIT_MAX", 8.0)

    # 모드별 생성 파라미터
    SIMPLE_TEMPERATURE: float = _float("SIMPLE_TEMPERATURE", 0.3)
    DETAILED_TEMPERATURE: float = _float("DETAILED_TEMPERATURE", 0.7)
    SIMPLE_MAX_TOKENS: int = _int("SIMPLE_MAX_TOKENS", 900)
    DETAILED_MAX_TOKENS: int = _int("DETAILED_MAX_TOKENS", 1800)

    # 입력 상한 (MVP 안전장치)
    MAX_TITLE_LEN: int = _int("MAX_TITLE_LEN", 200)

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
