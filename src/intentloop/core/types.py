"""
[IL-A004] intentloop.core.types
공통 타입 정의

version: 1.1.0
created: 2026-10-02
modified: 2026-10-09
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal


class Intent(StrEnum):  # [IL-A004.1]
    """고객 메시지 의도. 닫힌 집합 — 이 외의 값은 무효."""

    CONSULT_ORDER = "consult_order"
    COMPLAINT = "complaint"
    SALES = "sales"
    SUPPORT = "support"
    TRACKING = "tracking"
    INFO_GENERAL = "info_general"

    @classmethod
    def parse(cls, value: object) -> Intent | None:  # [IL-A004.1.1]
        """문자열을 Intent로 변환. 집합 밖이면 None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


# 게이트웨이 실패 시 AttemptRecord에만 쓰이는 합성 마커. Intent가 아님.
ERROR_INTENT = "error"

# 일반 폴백 의도
FALLBACK_INTENT = Intent.INFO_GENERAL

# 공통 타입 별칭
EntityValue = str | int | float | bool | None
Entities = dict[str, EntityValue]
ResultIntent = Intent | Literal["error"]
