"""
[IL-A003] intentloop.core.exceptions
커스텀 예외 계층 구조

불일치(mismatch)와 소진(exhaustion)은 예외가 아니라 정상 결과입니다.

version: 1.1.0
created: 2026-10-02
modified: 2026-10-11
"""


class IntentloopError(Exception):  # [IL-A003.1]
    """intentloop 기본 예외. 모든 커스텀 예외의 부모."""


class ConfigError(IntentloopError):  # [IL-A003.2]
    """설정 관련 에러."""


class LLMError(IntentloopError):  # [IL-A003.3]
    """LLM 호출 관련 에러. 폴백 체인의 모든 모델이 실패한 경우."""


class InvalidInputError(IntentloopError):  # [IL-A003.4]
    """빈 메시지 등 잘못된 입력. 시도를 소비하지 않고 즉시 호출자에게 전달."""


class ClassificationError(IntentloopError):  # [IL-A003.5]
    """분류 호출 실패, 잘못된 응답 형식, 집합 밖의 의도.

    오케스트레이터 내부에서 실패한 AttemptRecord로 흡수됩니다.
    """


class RecordingError(IntentloopError):  # [IL-A003.6]
    """상호작용 기록 저장 실패. 항상 로그만 남기고 전파하지 않음."""


class EvaluationCancelledError(IntentloopError):  # [IL-A003.7]
    """호출자가 취소 신호를 보내 평가가 중단됨."""
