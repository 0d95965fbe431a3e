"""
[IL-T002] tests.unit.test_prompts
PromptComposer 단위 테스트

version: 1.0.0
created: 2026-10-02
"""

import pytest

from intentloop.classification.prompts import FEW_SHOT_EXAMPLES, PromptComposer
from intentloop.core.models import AttemptRecord, ClassificationResult
from intentloop.core.types import Intent


def _attempt(n: int, intent) -> AttemptRecord:
    if intent == "error":
        result = ClassificationResult.error_marker("timeout")
    else:
        result = ClassificationResult(intent=intent, confidence=0.8, tokens_used=100)
    return AttemptRecord(attempt_number=n, prompt_used="prev", result=result, tokens_used=100)


@pytest.fixture
def composer():
    return PromptComposer()


class TestInitialPrompt:  # [IL-T002.1]
    def test_contains_message_and_all_intents(self, composer):
        prompt = composer.build_initial_prompt("¿Dónde está mi pedido?")
        assert '"¿Dónde está mi pedido?"' in prompt
        for intent in Intent:
            assert f"- {intent.value}:" in prompt

    def test_contains_few_shot_examples(self, composer):
        prompt = composer.build_initial_prompt("Hola")
        for text, _intent, _why in FEW_SHOT_EXAMPLES:
            assert text in prompt

    def test_requests_json_reply(self, composer):
        prompt = composer.build_initial_prompt("Hola")
        for field in ('"intent"', '"entities"', '"confidence"', '"reasoning"'):
            assert field in prompt

    def test_no_retry_context_without_history(self, composer):
        prompt = composer.build_initial_prompt("Hola")
        assert "CONTEXTO DE REINTENTO" not in prompt
        assert "EVITA" not in prompt

    def test_retry_context_mentions_previous_intent(self, composer):
        prompt = composer.build_initial_prompt(
            "Mi pedido no ha llegado", [_attempt(1, Intent.COMPLAINT)]
        )
        assert "CONTEXTO DE REINTENTO" in prompt
        assert '"complaint"' in prompt

    def test_avoid_clause_excludes_expected_and_errors(self, composer):
        attempts = [
            _attempt(1, Intent.COMPLAINT),
            _attempt(2, "error"),
            _attempt(3, Intent.TRACKING),
            _attempt(4, Intent.COMPLAINT),
        ]
        prompt = composer.build_initial_prompt("Mi pedido", attempts, Intent.TRACKING)
        avoid_line = next(line for line in prompt.splitlines() if line.startswith("EVITA"))
        assert avoid_line.endswith(": complaint")

    def test_braces_in_message_are_kept(self, composer):
        prompt = composer.build_initial_prompt("pedido {123}")
        assert "pedido {123}" in prompt


class TestAvoidedIntents:  # [IL-T002.2]
    def test_first_seen_order_without_duplicates(self):
        attempts = [
            _attempt(1, Intent.SALES),
            _attempt(2, Intent.COMPLAINT),
            _attempt(3, Intent.SALES),
        ]
        assert PromptComposer.avoided_intents(attempts) == [Intent.SALES, Intent.COMPLAINT]

    def test_only_expected_leaves_nothing(self):
        attempts = [_attempt(1, Intent.SALES)]
        assert PromptComposer.avoided_intents(attempts, Intent.SALES) == []


class TestRetryPrompt:  # [IL-T002.3]
    def test_contains_message_and_expected(self, composer):
        prompt = composer.build_retry_prompt(
            "Mi pedido no ha llegado", [_attempt(1, Intent.COMPLAINT)], Intent.TRACKING
        )
        assert "Mi pedido no ha llegado" in prompt
        assert "INTENCIÓN ESPERADA PARA VALIDACIÓN: tracking" in prompt
        assert "CLASIFICACIONES ANTERIORES: complaint" in prompt

    def test_lists_errors_in_history(self, composer):
        prompt = composer.build_retry_prompt(
            "Hola", [_attempt(1, "error"), _attempt(2, Intent.SALES)], Intent.SUPPORT
        )
        assert "CLASIFICACIONES ANTERIORES: error, sales" in prompt

    def test_asks_for_honest_reassessment_and_json(self, composer):
        prompt = composer.build_retry_prompt("Hola", [_attempt(1, Intent.SALES)], Intent.SUPPORT)
        assert "sé honesto" in prompt
        assert '"intent"' in prompt
