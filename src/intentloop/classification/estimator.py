"""
[IL-D004] intentloop.classification.estimator
키워드 가중치 + 최근 이력 기반 의도 추정

기대 의도가 주어지지 않은 인바운드 메시지(채팅 등)에 대해
분류 전에 가장 가능성 높은 의도를 추정합니다. I/O 없는 결정적 함수이며,
사용자 이력은 HistoryProvider를 통해서만 읽습니다.

version: 1.1.0
created: 2026-10-04
modified: 2026-10-12
dependencies: pyyaml>=6.0.2
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Protocol

import structlog
import yaml
from pydantic import ValidationError

from intentloop.core.config import EstimatorConfig
from intentloop.core.types import FALLBACK_INTENT, Intent

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from intentloop.core.models import HistoryEntry

logger = structlog.get_logger()


class HistoryProvider(Protocol):  # [IL-D004.1]
    """사용자별 최근 대화 이력 제공자."""

    async def recent_history(self, user_id: str) -> Sequence[HistoryEntry]: ...


class IntentEstimator:  # [IL-D004.2]
    """키워드 점수와 최근 이력으로 의도를 추정합니다.

    1. 메시지를 소문자로 바꾼 뒤 의도별 키워드 가중치 합산
    2. 가장 최근 이력이 window 이내이고 info_general이 아니면 그 의도 우선
    3. 아니면 최고 점수가 min_score 이상일 때 그 의도, 그 외 info_general

    동점은 키워드 테이블 순서상 먼저 나온 의도가 이깁니다.

    사용법:
        estimator = IntentEstimator()
        # 또는 YAML 파일에서 키워드 로드:
        estimator = IntentEstimator.from_yaml(Path("keywords.yaml"))

        intent = estimator.estimate("quiero el seguimiento", history)
    """

    def __init__(
        self,
        config: EstimatorConfig | None = None,
        history: HistoryProvider | None = None,
    ) -> None:
        self.config = config or EstimatorConfig()
        self.history = history
        self._table = self._compile_table(self.config.keyword_weights)

    @staticmethod
    def _compile_table(
        raw: dict[str, dict[str, float]],
    ) -> list[tuple[Intent, list[tuple[str, float]]]]:  # [IL-D004.2.1]
        """설정 테이블을 (Intent, [(키워드, 가중치)]) 리스트로 변환. 잘못된 의도는 건너뜀."""
        table: list[tuple[Intent, list[tuple[str, float]]]] = []
        for name, keywords in raw.items():
            intent = Intent.parse(name)
            if intent is None or not isinstance(keywords, dict):
                logger.warning("estimator_unknown_intent", intent=name)
                continue
            table.append((intent, [(k.lower(), float(w)) for k, w in keywords.items()]))
        return table

    @classmethod
    def from_yaml(
        cls,
        path: Path,
        config: EstimatorConfig | None = None,
        history: HistoryProvider | None = None,
    ) -> IntentEstimator:  # [IL-D004.2.2]
        """YAML 파일에서 키워드 테이블을 로드합니다.

        파일이 없거나 형식이 잘못되면 기본 테이블을 사용합니다.

        YAML 포맷:
            keywords:
              tracking:
                seguimiento: 3.0
        """
        base = config or EstimatorConfig()
        if not path.exists():
            logger.info("estimator_yaml_not_found", path=str(path))
            return cls(config=base, history=history)

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            logger.warning("estimator_yaml_invalid", path=str(path), error=str(e))
            return cls(config=base, history=history)
        if not isinstance(data, dict) or not isinstance(data.get("keywords"), dict):
            logger.warning("estimator_yaml_invalid", path=str(path))
            return cls(config=base, history=history)

        keywords = data["keywords"]
        try:
            config = EstimatorConfig.model_validate(
                {**base.model_dump(), "keyword_weights": keywords}
            )
        except ValidationError as e:
            logger.warning("estimator_yaml_invalid", path=str(path), error=str(e))
            return cls(config=base, history=history)

        logger.info("estimator_yaml_loaded", path=str(path), intent_count=len(keywords))
        return cls(config=config, history=history)

    def score_keywords(self, message: str) -> list[tuple[Intent, float]]:  # [IL-D004.3]
        """의도별 키워드 점수. 내림차순, 동점은 테이블 순서 유지 (안정 정렬)."""
        lowered = message.lower()
        scores = [
            (intent, sum(weight for keyword, weight in keywords if keyword in lowered))
            for intent, keywords in self._table
        ]
        return sorted(scores, key=lambda pair: pair[1], reverse=True)

    def history_intent(
        self,
        recent_history: Sequence[HistoryEntry],
        now: datetime | None = None,
    ) -> Intent | None:  # [IL-D004.4]
        """가장 최근 이력이 window 이내면 그 의도, 아니면 None."""
        if not recent_history:
            return None
        now = now or datetime.now(UTC)
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        latest = max(recent_history, key=lambda entry: entry.timestamp)
        window = timedelta(minutes=self.config.history_window_minutes)
        if latest.timestamp > now - window:
            return latest.intent
        return None

    def estimate(
        self,
        message: str,
        recent_history: Sequence[HistoryEntry] = (),
        now: datetime | None = None,
    ) -> Intent:  # [IL-D004.5]
        """메시지와 이력 스냅샷으로 의도를 추정합니다 (순수 함수).

        Args:
            message: 고객 메시지
            recent_history: 사용자 최근 이력
            now: 기준 시각 (테스트용, 기본값 현재 UTC)

        Returns:
            추정된 Intent
        """
        from_history = self.history_intent(recent_history, now)
        if from_history is not None and from_history != FALLBACK_INTENT:
            return from_history

        ranked = self.score_keywords(message)
        if ranked and ranked[0][1] >= self.config.min_score:
            return ranked[0][0]
        return FALLBACK_INTENT

    async def estimate_for_user(self, message: str, user_id: str) -> Intent:  # [IL-D004.6]
        """사용자 이력을 조회해 의도를 추정합니다.

        이력 조회 실패는 빈 이력으로 취급하고, 추정 자체가 실패하면 info_general을 반환합니다.
        """
        history: Sequence[HistoryEntry] = ()
        if self.history is not None:
            try:
                history = await self.history.recent_history(user_id)
            except Exception as e:
                logger.warning("user_history_unavailable", user_id=user_id, error=str(e))

        try:
            intent = self.estimate(message, history)
        except Exception as e:
            logger.error("intent_estimation_failed", user_id=user_id, error=str(e))
            return FALLBACK_INTENT
        logger.info("intent_estimated", user_id=user_id, intent=intent.value)
        return intent
