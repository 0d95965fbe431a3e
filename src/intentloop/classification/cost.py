"""
[IL-D001] intentloop.classification.cost
토큰 수 → USD 비용 선형 모델

version: 1.0.0
created: 2026-10-02
modified: 2026-10-02
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from intentloop.core.config import CostConfig

if TYPE_CHECKING:
    from collections.abc import Iterable

    from intentloop.core.models import AttemptRecord


class CostEstimator:  # [IL-D001.1]
    """cost = tokens / 1000 * rate_per_k_tokens."""

    def __init__(self, config: CostConfig | None = None) -> None:
        self.config = config or CostConfig()

    @property
    def rate_per_k_tokens(self) -> float:
        return self.config.rate_per_k_tokens

    def cost(self, tokens: int) -> float:  # [IL-D001.2]
        """토큰 수에 대한 비용 (USD)."""
        if tokens < 0:
            raise ValueError(f"tokens must be >= 0, got {tokens}")
        return (tokens / 1000) * self.config.rate_per_k_tokens

    @staticmethod
    def total_tokens(attempts: Iterable[AttemptRecord]) -> int:  # [IL-D001.3]
        """모든 시도의 토큰 합계 (실패한 시도 포함)."""
        return sum(a.tokens_used for a in attempts)

    def cost_for_attempts(self, attempts: Iterable[AttemptRecord]) -> float:  # [IL-D001.4]
        return self.cost(self.total_tokens(attempts))

    @staticmethod
    def format_cost(cost: float) -> str:  # [IL-D001.5]
        """$0.0026 형식 (소수점 4자리)."""
        return f"${cost:.4f}"
