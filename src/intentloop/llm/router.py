"""
[IL-C001] intentloop.llm.router
LiteLLM 라우터 래퍼 - 멀티 LLM 프로바이더 폴백

version: 1.1.0
created: 2026-10-02
modified: 2026-10-10
dependencies: litellm>=1.81.12, pyyaml>=6.0.2
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import litellm
import structlog
import yaml

from intentloop.core.config import LLMConfig
from intentloop.core.exceptions import ConfigError, LLMError

logger = structlog.get_logger()

# litellm에 그대로 전달하는 추가 파라미터
_PASSTHROUGH_PARAMS = ("temperature", "max_tokens", "response_format")


class LLMRouter:  # [IL-C001.1]
    """LiteLLM 기반 LLM 라우터.

    폴백 체인을 config.models 리스트 순서로 시도합니다.
    API 키가 없는 프로바이더의 모델은 체인에서 제외됩니다.
    """

    def __init__(self, config: LLMConfig | None = None) -> None:
        self.config = config or LLMConfig()
        self._models = self._filter_available_models(self._load_models())
        litellm.drop_params = True
        if not self._models:
            raise LLMError("사용 가능한 LLM 모델이 없습니다. API 키를 확인하세요.")
        logger.info("llm_router_init", models=self._models)

    @staticmethod
    def _filter_available_models(models: list[str]) -> list[str]:  # [IL-C001.2]
        """API 키가 설정된 프로바이더의 모델만 반환합니다."""
        available: list[str] = []
        for m in models:
            if m.startswith("gemini/"):
                if os.environ.get("GEMINI_API_KEY"):
                    available.append(m)
            elif m.startswith("anthropic/") or m.startswith("claude"):
                if os.environ.get("ANTHROPIC_API_KEY"):
                    available.append(m)
            elif m.startswith("ollama/"):
                # 로컬 모델은 키 불필요
                available.append(m)
            else:
                if os.environ.get("OPENAI_API_KEY"):
                    available.append(m)
        return available

    def _load_models(self) -> list[str]:  # [IL-C001.3]
        """모델 목록을 로드합니다. YAML 파일 우선, 없으면 config.models 사용."""
        config_path = Path(self.config.config_file)
        if config_path.exists():
            with config_path.open(encoding="utf-8") as f:
                try:
                    yaml_config = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ConfigError(f"LLM 설정 파일 파싱 실패: {config_path}") from e
            if isinstance(yaml_config, dict) and "models" in yaml_config:
                if not isinstance(yaml_config["models"], list):
                    raise ConfigError(f"models는 리스트여야 합니다: {config_path}")
                models = [m["model"] if isinstance(m, dict) else m for m in yaml_config["models"]]
                logger.info("llm_models_loaded_from_yaml", path=str(config_path), count=len(models))
                return models
        return list(self.config.models)

    async def complete(  # [IL-C001.4]
        self,
        messages: list[dict[str, str]],
        model: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """LLM 호출 (폴백 체인 포함).

        Args:
            messages: 대화 메시지 리스트
            model: 특정 모델 지정 (None이면 폴백 체인 사용)
            **kwargs: temperature, max_tokens, response_format

        Returns:
            LLM 응답 딕셔너리 (choices, usage 포함)

        Raises:
            LLMError: 체인의 모든 모델이 실패한 경우
        """
        models = [model] if model else self._models
        last_error: Exception | None = None

        for m in models:
            try:
                call_kwargs: dict[str, Any] = {
                    "model": m,
                    "messages": messages,
                    "timeout": self.config.timeout,
                }
                for k in _PASSTHROUGH_PARAMS:
                    if kwargs.get(k) is not None:
                        call_kwargs[k] = kwargs[k]

                response = await litellm.acompletion(**call_kwargs)
                logger.debug("llm_call_success", model=m)
                return response.model_dump()
            except Exception as e:
                last_error = e
                logger.warning("llm_call_failed", model=m, error=str(e))
                continue

        raise LLMError(f"모든 LLM 호출 실패. 마지막 에러: {last_error}") from last_error

    @property
    def models(self) -> list[str]:
        """현재 폴백 체인 모델 목록."""
        return list(self._models)
