"""
[IL-E001] intentloop.storage.recorder
상호작용 기록 저장소 인터페이스 + 인메모리 구현

오케스트레이터는 record()만 호출합니다 (추가 전용).
인메모리 구현은 시도 횟수별 조회와 사용자 이력 제공(HistoryProvider)을 겸합니다.

version: 1.1.0
created: 2026-10-03
modified: 2026-10-13
dependencies: structlog>=25.5.0
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import structlog

from intentloop.core.models import HistoryEntry

if TYPE_CHECKING:
    from intentloop.core.models import InteractionRecord

logger = structlog.get_logger()

MAX_QUERY_LIMIT = 100
DEFAULT_QUERY_LIMIT = 50


class InteractionRecorder(Protocol):  # [IL-E001.1]
    """InteractionRecord 영구 저장 협력자. 실패는 호출 측에서 잡아 로그만 남김."""

    async def record(self, interaction: InteractionRecord) -> None: ...


class InMemoryInteractionRecorder:  # [IL-E001.2]
    """인메모리 기록 저장소.

    최대 크기를 넘으면 가장 오래된 기록부터 버립니다.
    """

    def __init__(self, max_entries: int = 1000, max_attempts: int = 3) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self._entries: list[InteractionRecord] = []
        self._max_entries = max_entries
        self._max_attempts = max_attempts

    async def record(self, interaction: InteractionRecord) -> None:  # [IL-E001.3]
        """기록을 추가합니다."""
        self._entries.append(interaction)
        if len(self._entries) > self._max_entries:
            self._entries = self._entries[-self._max_entries :]
        logger.debug(
            "interaction_stored",
            interaction_id=interaction.id,
            ok=interaction.outcome.ok,
            attempts=len(interaction.attempts),
        )

    async def by_attempts(
        self, attempts: int, limit: int = DEFAULT_QUERY_LIMIT
    ) -> list[InteractionRecord]:  # [IL-E001.4]
        """정확히 attempts번 시도한 상호작용을 최신순으로 조회합니다.

        Args:
            attempts: 사용된 시도 횟수 (1~max_attempts)
            limit: 최대 결과 수 (1~100으로 보정)

        Raises:
            ValueError: attempts가 1~max_attempts 범위 밖인 경우
        """
        if not 1 <= attempts <= self._max_attempts:
            raise ValueError(
                f"attempts must be between 1 and {self._max_attempts}, got {attempts}"
            )
        limit = max(1, min(limit, MAX_QUERY_LIMIT))
        matches = [e for e in reversed(self._entries) if e.outcome.attempts_used == attempts]
        return matches[:limit]

    async def recent_history(
        self, user_id: str, limit: int = 10
    ) -> list[HistoryEntry]:  # [IL-E001.5]
        """사용자의 성공한 상호작용을 HistoryEntry로 최신순 반환 (HistoryProvider)."""
        history: list[HistoryEntry] = []
        for entry in reversed(self._entries):
            if entry.metadata.user_id != user_id or entry.outcome.intent is None:
                continue
            history.append(
                HistoryEntry(
                    timestamp=entry.recorded_at,
                    message=entry.message,
                    intent=entry.outcome.intent,
                )
            )
            if len(history) >= limit:
                break
        return history

    def get_recent(self, count: int = 50) -> list[InteractionRecord]:
        """최근 기록 (오래된 순)."""
        return list(self._entries[-count:])

    def clear(self) -> None:
        """저장소를 초기화합니다."""
        self._entries.clear()

    @property
    def count(self) -> int:
        """현재 기록 수."""
        return len(self._entries)
