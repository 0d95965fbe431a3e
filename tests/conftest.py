"""
[IL-T000] tests.conftest
공통 테스트 픽스처

version: 1.0.0
created: 2026-10-02
"""

from __future__ import annotations

import pytest

from intentloop.core.config import IntentloopConfig, RetryConfig


class SleepRecorder:
    """asyncio.sleep 대체 — 실제로 기다리지 않고 요청된 지연만 기록."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def config() -> IntentloopConfig:
    """테스트용 설정."""
    return IntentloopConfig(debug=True, log_level="DEBUG")


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def inline_retry_config() -> RetryConfig:
    """기록을 백그라운드가 아닌 인라인으로 저장하는 재시도 설정."""
    return RetryConfig(record_in_background=False)


@pytest.fixture
def openai_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """LLMRouter가 OpenAI 계열 모델을 사용 가능으로 보도록 더미 키 설정."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
