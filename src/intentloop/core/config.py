"""
[IL-A002] intentloop.core.config
pydantic-settings 기반 환경변수 설정 관리

version: 1.2.0
created: 2026-10-02
modified: 2026-10-14
dependencies: pydantic-settings>=2.13
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from intentloop.core.types import Intent

# 키워드 가중치 기본 테이블. 순서가 동점 처리 순서를 결정하므로 변경 주의.
DEFAULT_KEYWORD_WEIGHTS: dict[str, dict[str, float]] = {
    Intent.TRACKING.value: {
        "pedido": 2.0,
        "envío": 2.0,
        "seguimiento": 3.0,
        "llegar": 1.5,
    },
    Intent.CONSULT_ORDER.value: {
        "estado": 2.5,
        "número de pedido": 3.0,
    },
    Intent.COMPLAINT.value: {
        "reclamo": 3.0,
        "queja": 3.0,
    },
    Intent.SALES.value: {
        "precio": 2.0,
        "comprar": 2.0,
    },
    Intent.SUPPORT.value: {
        "ayuda": 1.5,
        "soporte": 2.0,
    },
}


class LLMConfig(BaseSettings):  # [IL-A002.1]
    """LiteLLM 라우터 설정.

    모델 폴백 체인은 models 리스트로 설정.
    llm_config.yaml 파일로도 설정 가능 (환경변수보다 우선).
    """

    model_config = SettingsConfigDict(env_prefix="LLM_")

    models: list[str] = Field(
        default=["gpt-3.5-turbo"],
        description="폴백 순서대로 나열. 첫 번째가 1차 모델",
    )
    config_file: str = Field(default="llm_config.yaml", description="YAML 설정 파일 경로")
    timeout: int = Field(default=30, description="초 단위")


class ClassifierConfig(BaseSettings):  # [IL-A002.2]
    """분류 호출 파라미터."""

    model_config = SettingsConfigDict(env_prefix="CLASSIFIER_")

    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=200, ge=1)
    json_mode: bool = Field(default=True, description="response_format=json_object 사용")


class RetryConfig(BaseSettings):  # [IL-A002.3]
    """재시도 루프 설정. 지연 = backoff_base_ms * backoff_factor ** (다음 시도 번호)."""

    model_config = SettingsConfigDict(env_prefix="RETRY_")

    max_attempts: int = Field(default=3, ge=1)
    backoff_base_ms: int = Field(default=100, ge=0)
    backoff_factor: float = Field(default=2.0, ge=1.0)
    record_in_background: bool = Field(
        default=True, description="기록 저장을 백그라운드 태스크로 넘김"
    )


class CostConfig(BaseSettings):  # [IL-A002.4]
    """토큰 비용 설정."""

    model_config = SettingsConfigDict(env_prefix="COST_")

    rate_per_k_tokens: float = Field(default=0.002, ge=0.0, description="1K 토큰당 USD")


class EstimatorConfig(BaseSettings):  # [IL-A002.5]
    """키워드/이력 기반 의도 추정 설정."""

    model_config = SettingsConfigDict(env_prefix="ESTIMATOR_")

    history_window_minutes: float = Field(default=10.0, ge=0.0)
    min_score: float = Field(default=1.0, ge=0.0)
    keyword_weights: dict[str, dict[str, float]] = Field(
        default_factory=lambda: {k: dict(v) for k, v in DEFAULT_KEYWORD_WEIGHTS.items()},
        description="{intent: {keyword: weight}} — 순서대로 동점 처리",
    )


class IntentloopConfig(BaseSettings):  # [IL-A002.6]
    """intentloop 메인 설정. 모든 하위 설정을 포함."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console", description="console|json")

    llm: LLMConfig = Field(default_factory=LLMConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    cost: CostConfig = Field(default_factory=CostConfig)
    estimator: EstimatorConfig = Field(default_factory=EstimatorConfig)
