"""
[IL-A001] intentloop.core.models
분류 결과, 시도 기록, 평가 결과, 상호작용 기록 값 객체

모든 모델은 frozen — 생성 후 변경 불가.

version: 1.2.0
created: 2026-10-02
modified: 2026-10-13
dependencies: pydantic>=2.12, uuid6>=2025.0
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from uuid6 import uuid7

from intentloop.core.types import ERROR_INTENT, EntityValue, Intent, ResultIntent


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ClassificationResult(BaseModel):  # [IL-A001.1]
    """모델 호출 1회의 결과."""

    model_config = ConfigDict(frozen=True)

    intent: ResultIntent
    entities: dict[str, EntityValue] = Field(default_factory=dict)
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    reasoning: str | None = None
    tokens_used: int = Field(default=0, ge=0)

    @classmethod
    def error_marker(cls, message: str) -> ClassificationResult:  # [IL-A001.1.1]
        """게이트웨이 실패를 나타내는 합성 결과."""
        return cls(
            intent=ERROR_INTENT,
            entities={},
            confidence=0.0,
            reasoning=f"Error: {message}",
            tokens_used=0,
        )

    @property
    def is_error(self) -> bool:
        return self.intent == ERROR_INTENT


class AttemptRecord(BaseModel):  # [IL-A001.2]
    """재시도 사이클 1회의 기록. 오케스트레이터 실행 하나가 독점 소유."""

    model_config = ConfigDict(frozen=True)

    attempt_number: int = Field(ge=1)
    prompt_used: str
    result: ClassificationResult
    timestamp: datetime = Field(default_factory=_utcnow)
    duration_ms: int = Field(default=0, ge=0)
    tokens_used: int = Field(default=0, ge=0)
    error: str | None = None


class EvaluationOutcome(BaseModel):  # [IL-A001.3]
    """evaluate() 호출 1회의 최종 결과."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    attempts_used: int = Field(ge=1)
    intent: Intent | None = None
    entities: dict[str, EntityValue] | None = None
    cost_usd: float | None = Field(default=None, ge=0.0)
    total_tokens: int | None = Field(default=None, ge=0)
    error: str | None = None
    last_error: str | None = None


class Metadata(BaseModel):  # [IL-A001.4]
    """호출자 메타데이터."""

    model_config = ConfigDict(frozen=True)

    user_id: str | None = None
    source: str = "api"
    session_id: str | None = None
    user_agent: str | None = None
    received_at: datetime = Field(default_factory=_utcnow)


class HistoryEntry(BaseModel):  # [IL-A001.5]
    """사용자 대화 이력 1건 (의도 추정용)."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    message: str = ""
    intent: Intent
    response: str = ""

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        """타임존 없는 시각은 UTC로 간주."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class InteractionRecord(BaseModel):  # [IL-A001.6]
    """evaluate() 1회 실행의 영구 로그. 저장 후 변경되지 않음.

    UUIDv7 기반 ID로 시간순 정렬 가능.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid7()))
    message: str
    expected_intent: Intent
    attempts: tuple[AttemptRecord, ...] = ()
    outcome: EvaluationOutcome
    processing_time_ms: int = Field(default=0, ge=0)
    metadata: Metadata = Field(default_factory=Metadata)
    recorded_at: datetime = Field(default_factory=_utcnow)
