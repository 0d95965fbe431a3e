"""
[IL-D005] intentloop.classification.orchestrator
제한된 재시도 의도분류 오케스트레이터 — 코어 상태 머신

Attempting(1) → … → Attempting(max) → Succeeded | Exhausted

- 1회차는 최초 프롬프트, 2회차부터는 재분석 프롬프트
- 게이트웨이 실패는 에러 마커 시도로 기록하고 지연 없이 다음 시도로
- 불일치는 기록 후 지수 백오프(다음 시도 번호 기준) 뒤 재시도
- 종료 시 InteractionRecord를 기록 저장소로 넘김 (실패해도 결과에 영향 없음)

version: 1.3.0
created: 2026-10-02
modified: 2026-10-16
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from intentloop.classification.cost import CostEstimator
from intentloop.classification.prompts import PromptComposer
from intentloop.core.config import RetryConfig
from intentloop.core.exceptions import (
    ClassificationError,
    EvaluationCancelledError,
    InvalidInputError,
    RecordingError,
)
from intentloop.core.logging import preview
from intentloop.core.models import (
    AttemptRecord,
    ClassificationResult,
    EvaluationOutcome,
    InteractionRecord,
    Metadata,
)
from intentloop.core.types import Intent

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from intentloop.classification.gateway import ClassificationGateway
    from intentloop.storage.recorder import InteractionRecorder

logger = structlog.get_logger()


@dataclass(frozen=True)
class EvaluationRequest:  # [IL-D005.1]
    """evaluate_many() 입력 1건."""

    message: str
    expected_intent: Intent | str
    metadata: Metadata | None = None


class RetryOrchestrator:  # [IL-D005.2]
    """기대 의도와 일치할 때까지 최대 max_attempts회 분류를 시도합니다.

    평가 1회 안의 시도는 항상 순차 실행됩니다 (재시도 프롬프트가 이전 이력에 의존).
    서로 다른 evaluate() 호출은 공유 상태 없이 동시에 실행될 수 있습니다.

    sleep/clock은 테스트에서 실제 대기 없이 전체 경로를 돌리기 위해 주입 가능합니다.
    """

    def __init__(
        self,
        gateway: ClassificationGateway,
        composer: PromptComposer | None = None,
        cost: CostEstimator | None = None,
        recorder: InteractionRecorder | None = None,
        config: RetryConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.gateway = gateway
        self.composer = composer or PromptComposer()
        self.cost = cost or CostEstimator()
        self.recorder = recorder
        self.config = config or RetryConfig()
        self._sleep = sleep
        self._clock = clock
        # 백그라운드 기록 태스크 참조 (GC 방지)
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def max_attempts(self) -> int:
        return self.config.max_attempts

    @property
    def exhausted_message(self) -> str:
        return f"Classification did not match expected intent after {self.max_attempts} attempts"

    def backoff_seconds(self, next_attempt: int) -> float:  # [IL-D005.3]
        """다음 시도 전 대기 시간. 2회차 0.4초, 3회차 0.8초 (기본값)."""
        delay_ms = self.config.backoff_base_ms * self.config.backoff_factor**next_attempt
        return delay_ms / 1000

    async def evaluate(  # [IL-D005.4]
        self,
        message: str,
        expected_intent: Intent | str,
        metadata: Metadata | None = None,
        cancel: asyncio.Event | None = None,
    ) -> EvaluationOutcome:
        """메시지를 분류하고 기대 의도와 비교합니다.

        Args:
            message: 고객 메시지
            expected_intent: 기대 의도
            metadata: 호출자 메타데이터 (user_id, source, session_id)
            cancel: 설정되면 다음 게이트웨이 호출 전에 중단

        Returns:
            EvaluationOutcome (성공 또는 소진)

        Raises:
            InvalidInputError: 빈 메시지 또는 집합 밖 기대 의도 (시도 소비 없음)
            EvaluationCancelledError: cancel 신호 감지 (기록하지 않음)
        """
        if not isinstance(message, str) or not message.strip():
            raise InvalidInputError("message must not be empty")
        expected = Intent.parse(expected_intent)
        if expected is None:
            raise InvalidInputError(f"unknown expected intent: {expected_intent!r}")

        metadata = metadata or Metadata()
        started = self._clock()
        attempts: list[AttemptRecord] = []
        log = logger.bind(expected_intent=expected.value, user_id=metadata.user_id)
        log.info("evaluation_started", message=preview(message))

        for n in range(1, self.max_attempts + 1):
            self._check_cancelled(cancel, n)
            prompt = self._compose(n, message, attempts, expected)
            attempt_started = self._clock()

            try:
                result = await self.gateway.classify(prompt)
            except ClassificationError as e:
                attempts.append(self._error_attempt(n, prompt, str(e), attempt_started))
                log.warning("attempt_error", attempt=n, error=str(e))
                continue
            except Exception as e:
                # 게이트웨이 규약 밖 예외
                attempts.append(self._error_attempt(n, prompt, str(e), attempt_started))
                log.warning("attempt_error", attempt=n, error=str(e), error_type=type(e).__name__)
                continue

            attempts.append(
                AttemptRecord(
                    attempt_number=n,
                    prompt_used=prompt,
                    result=result,
                    duration_ms=self._elapsed_ms(attempt_started),
                    tokens_used=result.tokens_used,
                )
            )

            if result.intent == expected:
                outcome = self._succeeded(result, n, attempts)
                log.info(
                    "evaluation_succeeded",
                    attempt=n,
                    total_tokens=outcome.total_tokens,
                    cost=CostEstimator.format_cost(outcome.cost_usd or 0.0),
                )
                await self._finish(message, expected, attempts, outcome, started, metadata)
                return outcome

            log.warning("attempt_mismatch", attempt=n, got=str(result.intent))
            if n < self.max_attempts:
                await self._sleep(self.backoff_seconds(n + 1))

        outcome = self._exhausted(attempts)
        log.error("evaluation_exhausted", attempts=len(attempts), last_error=outcome.last_error)
        await self._finish(message, expected, attempts, outcome, started, metadata)
        return outcome

    async def evaluate_many(  # [IL-D005.5]
        self,
        requests: Sequence[EvaluationRequest],
        concurrency: int = 4,
    ) -> list[EvaluationOutcome | InvalidInputError]:
        """독립적인 평가 여러 건을 동시에 실행합니다. 결과는 요청 순서.

        잘못된 입력은 해당 위치에 InvalidInputError로 반환됩니다.
        """
        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def _one(request: EvaluationRequest) -> EvaluationOutcome | InvalidInputError:
            async with semaphore:
                try:
                    return await self.evaluate(
                        request.message, request.expected_intent, request.metadata
                    )
                except InvalidInputError as e:
                    return e

        return list(await asyncio.gather(*(_one(r) for r in requests)))

    async def flush(self) -> None:  # [IL-D005.6]
        """대기 중인 백그라운드 기록이 끝날 때까지 기다립니다."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    def _compose(
        self, n: int, message: str, attempts: list[AttemptRecord], expected: Intent
    ) -> str:
        if n == 1:
            return self.composer.build_initial_prompt(message, attempts, expected)
        return self.composer.build_retry_prompt(message, attempts, expected)

    def _check_cancelled(self, cancel: asyncio.Event | None, n: int) -> None:
        if cancel is not None and cancel.is_set():
            logger.info("evaluation_cancelled", before_attempt=n)
            raise EvaluationCancelledError(f"evaluation cancelled before attempt {n}")

    def _elapsed_ms(self, since: float) -> int:
        return max(0, round((self._clock() - since) * 1000))

    def _error_attempt(
        self, n: int, prompt: str, error: str, attempt_started: float
    ) -> AttemptRecord:
        return AttemptRecord(
            attempt_number=n,
            prompt_used=prompt,
            result=ClassificationResult.error_marker(error),
            duration_ms=self._elapsed_ms(attempt_started),
            tokens_used=0,
            error=error or "unknown error",
        )

    def _succeeded(
        self, result: ClassificationResult, n: int, attempts: list[AttemptRecord]
    ) -> EvaluationOutcome:
        total_tokens = self.cost.total_tokens(attempts)
        return EvaluationOutcome(
            ok=True,
            intent=Intent(result.intent),
            attempts_used=n,
            entities=dict(result.entities),
            cost_usd=self.cost.cost(total_tokens),
            total_tokens=total_tokens,
        )

    def _exhausted(self, attempts: list[AttemptRecord]) -> EvaluationOutcome:
        last = attempts[-1] if attempts else None
        return EvaluationOutcome(
            ok=False,
            attempts_used=self.max_attempts,
            error=self.exhausted_message,
            last_error=last.error if last is not None else None,
        )

    async def _finish(
        self,
        message: str,
        expected: Intent,
        attempts: list[AttemptRecord],
        outcome: EvaluationOutcome,
        started: float,
        metadata: Metadata,
    ) -> None:
        """종료 상태의 실행 전체를 기록 저장소로 넘깁니다 (복사본)."""
        if self.recorder is None:
            return

        interaction = InteractionRecord(
            message=message,
            expected_intent=expected,
            attempts=tuple(attempts),
            outcome=outcome,
            processing_time_ms=self._elapsed_ms(started),
            metadata=metadata,
            recorded_at=datetime.now(UTC),
        )
        if not self.config.record_in_background:
            await self._record(interaction)
            return

        task = asyncio.create_task(self._record(interaction))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _record(self, interaction: InteractionRecord) -> None:
        """기록 실패의 유일한 catch 경계. 실패는 로그만 남깁니다."""
        if self.recorder is None:
            return
        try:
            await self.recorder.record(interaction)
        except Exception as e:
            failure = RecordingError(f"{type(e).__name__}: {e}")
            logger.error(
                "interaction_record_failed",
                interaction_id=interaction.id,
                error=str(failure),
            )
            return
        logger.info(
            "interaction_recorded",
            interaction_id=interaction.id,
            ok=interaction.outcome.ok,
            attempts=len(interaction.attempts),
        )
