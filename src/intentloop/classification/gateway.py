"""
[IL-D003] intentloop.classification.gateway
분류 게이트웨이 — 불투명한 LLM 호출을 감싸고 응답을 파싱/검증

테스트에서 LLM 의존성을 대체하는 유일한 경계입니다.

version: 1.2.0
created: 2026-10-02
modified: 2026-10-15
dependencies: litellm>=1.81.12
"""

from __future__ import annotations

import json
import math
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from intentloop.core.config import ClassifierConfig
from intentloop.core.exceptions import ClassificationError, LLMError
from intentloop.core.models import ClassificationResult
from intentloop.core.types import Entities, Intent

if TYPE_CHECKING:
    from intentloop.llm.router import LLMRouter

logger = structlog.get_logger()

DEFAULT_CONFIDENCE = 0.5


class ClassificationGateway(Protocol):  # [IL-D003.1]
    """프롬프트 → ClassificationResult. 실패 시 ClassificationError."""

    async def classify(self, prompt: str) -> ClassificationResult: ...


class LLMClassificationGateway:  # [IL-D003.2]
    """LLMRouter 기반 게이트웨이.

    JSON 응답을 파싱하고, 의도가 닫힌 집합에 속하는지 검증하며,
    confidence는 범위 밖이면 0.5로 대체합니다 (거부하지 않음).
    """

    def __init__(self, router: LLMRouter, config: ClassifierConfig | None = None) -> None:
        self.router = router
        self.config = config or ClassifierConfig()

    async def classify(self, prompt: str) -> ClassificationResult:  # [IL-D003.3]
        """분류 호출 1회.

        Args:
            prompt: PromptComposer가 만든 프롬프트

        Returns:
            검증된 ClassificationResult

        Raises:
            ClassificationError: 업스트림 실패, 빈 응답, 파싱 실패, 집합 밖 의도
        """
        try:
            response = await self.router.complete(
                [{"role": "user", "content": prompt}],
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                response_format={"type": "json_object"} if self.config.json_mode else None,
            )
        except LLMError as e:
            raise ClassificationError(f"LLM call failed: {e}") from e

        content = _extract_content(response)
        if content is not None and not isinstance(content, str):
            raise ClassificationError(
                f"Unsupported AI response content: {type(content).__name__}"
            )
        if not content or not content.strip():
            raise ClassificationError("Empty response from AI")

        data = parse_reply(content)
        intent = Intent.parse(data.get("intent"))
        if intent is None:
            logger.warning("invalid_intent_received", intent=data.get("intent"))
            raise ClassificationError(f"AI returned invalid intent: {data.get('intent')!r}")

        reasoning = data.get("reasoning")
        return ClassificationResult(
            intent=intent,
            entities=normalize_entities(data.get("entities")),
            confidence=normalize_confidence(data.get("confidence")),
            reasoning=str(reasoning) if reasoning is not None else None,
            tokens_used=_tokens_used(response, content),
        )


def parse_reply(content: str) -> dict[str, Any]:  # [IL-D003.4]
    """모델 응답 텍스트를 JSON 객체로 파싱. 마크다운 코드 펜스 허용."""
    text = content.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        text = text.rsplit("```", 1)[0].strip()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ClassificationError(f"Unparseable AI response: {e}") from e
    if not isinstance(data, dict):
        raise ClassificationError(f"AI response is not a JSON object: {type(data).__name__}")
    return data


def normalize_confidence(value: Any) -> float:  # [IL-D003.5]
    """[0, 1] 범위의 숫자가 아니면 기본값 0.5."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return DEFAULT_CONFIDENCE
    if math.isnan(value) or value < 0 or value > 1:
        return DEFAULT_CONFIDENCE
    return float(value)


def normalize_entities(value: Any) -> Entities:  # [IL-D003.6]
    """엔티티를 str → 스칼라 매핑으로 정리. 중첩 값은 JSON 문자열로."""
    if not isinstance(value, dict):
        return {}
    entities: Entities = {}
    for key, item in value.items():
        if item is None or isinstance(item, str | int | float | bool):
            entities[str(key)] = item
        else:
            entities[str(key)] = json.dumps(item, ensure_ascii=False)
    return entities


def _extract_content(response: dict[str, Any]) -> Any:
    choices = response.get("choices") or []
    if not choices:
        return None
    message = choices[0].get("message") or {}
    return message.get("content")


def _tokens_used(response: dict[str, Any], content: str) -> int:
    """업스트림 usage 보고값, 없으면 문자 4개당 1토큰으로 추정."""
    usage = response.get("usage") or {}
    total = usage.get("total_tokens")
    if isinstance(total, int) and total > 0:
        return total
    return math.ceil(len(content) / 4)
