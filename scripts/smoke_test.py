from __future__ import annotations

import os
import sys

from app.domains.media_review.client import ClientState, ReviewClient


def main() -> None:
    # 1) 서버 주소는 환경변수로 바꿀 수 있음 (uvicorn app.main:app 실행 상태여야 함)
    base_url = os.getenv("REVIEW_API_URL", "http://localhost:8000")
    title = sys.argv[1] if len(sys.argv) > 1 else "Naruto"
    media_type = sys.argv[2] if len(sys.argv) > 2 else "manga"
    print(f"[INFO] REVIEW_API_URL={base_url} title={title!r} type={media_type}")

    # 2) pro + 리뷰 토글이면 detailed 모드로 요청
    client = ReviewClient(base_url, pro=os.getenv("REVIEW_PRO", "") == "1")
    client.show_review = client.pro

    # 3) 실제 요청 1회
    state = client.submit(title, media_type)
    if state is ClientState.ERROR:
        print("[FAIL]", client.error)
        client.close()
        sys.exit(1)

    print("[OK] review generated")
    for key, value in client.visible_sections().items():
        print(f"[RESULT] {key}: {value}")
    client.close()


if __name__ == "__main__":
    main()
