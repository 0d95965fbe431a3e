"""
[IL-T008] tests.unit.test_models
의도 타입, 값 객체, 설정 단위 테스트

version: 1.0.0
created: 2026-10-02
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from intentloop.core.config import IntentloopConfig, RetryConfig
from intentloop.core.models import (
    AttemptRecord,
    ClassificationResult,
    EvaluationOutcome,
    InteractionRecord,
    Metadata,
)
from intentloop.core.types import ERROR_INTENT, FALLBACK_INTENT, Intent


class TestIntent:  # [IL-T008.1]
    def test_closed_set(self):
        assert {i.value for i in Intent} == {
            "consult_order",
            "complaint",
            "sales",
            "support",
            "tracking",
            "info_general",
        }

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("tracking", Intent.TRACKING),
            ("  Complaint ", Intent.COMPLAINT),
            (Intent.SALES, Intent.SALES),
            ("refund", None),
            ("error", None),
            (None, None),
            (3, None),
        ],
    )
    def test_parse(self, raw, expected):
        assert Intent.parse(raw) is expected

    def test_fallback(self):
        assert FALLBACK_INTENT == Intent.INFO_GENERAL


class TestClassificationResult:  # [IL-T008.2]
    def test_defaults(self):
        result = ClassificationResult(intent=Intent.SUPPORT)
        assert result.confidence == 0.5
        assert result.entities == {}
        assert not result.is_error

    def test_error_marker(self):
        result = ClassificationResult.error_marker("timeout")
        assert result.intent == ERROR_INTENT
        assert result.is_error
        assert result.confidence == 0.0
        assert result.reasoning == "Error: timeout"
        assert result.tokens_used == 0

    def test_rejects_unknown_intent(self):
        with pytest.raises(ValidationError):
            ClassificationResult(intent="refund")

    def test_rejects_out_of_range_confidence(self):
        with pytest.raises(ValidationError):
            ClassificationResult(intent=Intent.SALES, confidence=1.2)

    def test_frozen(self):
        result = ClassificationResult(intent=Intent.SALES)
        with pytest.raises(ValidationError):
            result.intent = Intent.SUPPORT


class TestRecords:  # [IL-T008.3]
    def test_attempt_number_starts_at_one(self):
        with pytest.raises(ValidationError):
            AttemptRecord(
                attempt_number=0,
                prompt_used="p",
                result=ClassificationResult(intent=Intent.SALES),
            )

    def test_outcome_requires_an_attempt(self):
        with pytest.raises(ValidationError):
            EvaluationOutcome(ok=False, attempts_used=0)

    def test_interaction_ids_are_unique_and_ordered(self):
        outcome = EvaluationOutcome(ok=True, attempts_used=1, intent=Intent.SALES)
        first = InteractionRecord(message="a", expected_intent=Intent.SALES, outcome=outcome)
        second = InteractionRecord(message="b", expected_intent=Intent.SALES, outcome=outcome)
        assert first.id != second.id
        assert first.id < second.id

    def test_metadata_defaults(self):
        metadata = Metadata()
        assert metadata.source == "api"
        assert metadata.user_id is None
        assert metadata.received_at.tzinfo is not None

    def test_outcome_serializes(self):
        outcome = EvaluationOutcome(
            ok=True,
            attempts_used=2,
            intent=Intent.TRACKING,
            entities={"order": "123"},
            cost_usd=0.0026,
            total_tokens=1300,
        )
        data = outcome.model_dump(mode="json")
        assert data["intent"] == "tracking"
        assert data["entities"] == {"order": "123"}


class TestConfig:  # [IL-T008.4]
    def test_defaults(self, config):
        assert config.retry.max_attempts == 3
        assert config.retry.backoff_base_ms == 100
        assert config.retry.backoff_factor == 2.0
        assert config.cost.rate_per_k_tokens == 0.002
        assert config.estimator.history_window_minutes == 10.0
        assert list(config.estimator.keyword_weights)[0] == "tracking"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("COST_RATE_PER_K_TOKENS", "0.01")
        assert RetryConfig().max_attempts == 5
        config = IntentloopConfig()
        assert config.retry.max_attempts == 5
        assert config.cost.rate_per_k_tokens == 0.01

    def test_invalid_retry_config(self):
        with pytest.raises(ValidationError):
            RetryConfig(max_attempts=0)
