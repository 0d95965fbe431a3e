"""
[IL-D002] intentloop.classification.prompts
분류 프롬프트 구성 — 최초 프롬프트와 재분석(재시도) 프롬프트

고객 메시지가 스페인어이므로 프롬프트 본문도 스페인어로 작성합니다.
입력만으로 문자열을 만드는 순수 함수이며 I/O가 없습니다.

version: 1.2.0
created: 2026-10-02
modified: 2026-10-12
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from intentloop.core.types import ERROR_INTENT, Intent

if TYPE_CHECKING:
    from collections.abc import Sequence

    from intentloop.core.models import AttemptRecord

INTENT_DESCRIPTIONS: dict[Intent, str] = {
    Intent.CONSULT_ORDER: "Consultas sobre estado, detalle o datos de un pedido existente",
    Intent.COMPLAINT: "Reclamos, quejas, productos defectuosos o mal servicio",
    Intent.SALES: "Consultas comerciales: precios, productos, promociones, cotizaciones",
    Intent.SUPPORT: "Problemas técnicos, acceso a la cuenta, configuración o uso de la plataforma",
    Intent.TRACKING: "Seguimiento de envíos, ubicación del paquete, tiempo de entrega",
    Intent.INFO_GENERAL: "Información general: horarios, políticas, preguntas frecuentes",
}

# 평가 데이터셋과 겹치지 않는 일반 예시
FEW_SHOT_EXAMPLES: tuple[tuple[str, Intent, str], ...] = (
    (
        "¿Dónde está mi paquete?",
        Intent.TRACKING,
        "Pregunta por la ubicación o el estado del envío",
    ),
    (
        "El producto que recibí llegó roto",
        Intent.COMPLAINT,
        "Reporta un producto dañado",
    ),
    (
        "Me interesa conocer sus planes",
        Intent.SALES,
        "Solicita información comercial",
    ),
    (
        "No puedo entrar a mi cuenta",
        Intent.SUPPORT,
        "Tiene un problema de acceso",
    ),
    (
        "¿Qué datos tiene mi pedido 12345?",
        Intent.CONSULT_ORDER,
        "Consulta información de un pedido concreto",
    ),
    (
        "¿Cuál es el horario de atención?",
        Intent.INFO_GENERAL,
        "Pide información general",
    ),
)

RESPONSE_FORMAT = """\
RESPONDE EXCLUSIVAMENTE CON UN OBJETO JSON:
{
  "intent": "una_de_las_intenciones_validas",
  "entities": { "clave": "valor" },
  "confidence": 0.95,
  "reasoning": "Explicación breve de la clasificación"
}"""

INITIAL_TEMPLATE = """\
ROL: Eres un clasificador de intenciones de servicio al cliente.

INTENCIONES VÁLIDAS (usa EXCLUSIVAMENTE una de estas):
{intents}

EJEMPLOS:
{examples}
{retry_context}
INSTRUCCIONES:
1. Analiza el significado del mensaje del usuario
2. Identifica la intención PRINCIPAL
3. Si hay ambigüedad, elige la intención más probable
4. Extrae entidades relevantes (números de pedido, productos, fechas)

MENSAJE A CLASIFICAR: "{message}"

{response_format}

IMPORTANTE:
- "intent" DEBE ser una de las {intent_count} intenciones válidas
- "confidence" refleja tu certeza entre 0.0 y 1.0
- No asumas contexto que no esté presente en el mensaje"""

RETRY_TEMPLATE = """\
REANÁLISIS REQUERIDO

MENSAJE ORIGINAL: "{message}"
CLASIFICACIONES ANTERIORES: {previous}
INTENCIÓN ESPERADA PARA VALIDACIÓN: {expected}

INTENCIONES VÁLIDAS:
{intents}

INSTRUCCIONES:
1. Vuelve a analizar el mensaje original de forma objetiva
2. Considera por qué las clasificaciones anteriores pudieron ser incorrectas
3. Elige la intención MÁS ADECUADA según el contenido del mensaje
4. No te limites a repetir la intención esperada; se usa solo para validar
5. Si el mensaje corresponde claramente a "{expected}", clasifícalo así
6. Si corresponde a otra intención, sé honesto

Tu tarea es clasificar con precisión, no adivinar la respuesta que esperamos.

{response_format}"""


class PromptComposer:  # [IL-D002.1]
    """최초/재시도 분류 프롬프트를 만듭니다.

    최초 프롬프트는 이전 시도가 있으면 "피해야 할 의도" 절을 포함하고,
    재시도 프롬프트는 기대 의도를 명시하면서도 객관적 재평가를 요구합니다.
    """

    def build_initial_prompt(  # [IL-D002.2]
        self,
        message: str,
        prior_attempts: Sequence[AttemptRecord] = (),
        expected_intent: Intent | None = None,
    ) -> str:
        """최초 분류 프롬프트.

        Args:
            message: 분류할 고객 메시지
            prior_attempts: 이전 시도 기록 (보통 비어 있음)
            expected_intent: 있으면 "피해야 할 의도" 목록에서 제외

        Returns:
            프롬프트 문자열
        """
        return INITIAL_TEMPLATE.format(
            intents=_intent_lines(),
            examples="\n".join(
                f'MENSAJE: "{text}" → INTENCIÓN: {intent.value} (RAZÓN: {why})'
                for text, intent, why in FEW_SHOT_EXAMPLES
            ),
            retry_context=self._retry_context(prior_attempts, expected_intent),
            message=message,
            response_format=RESPONSE_FORMAT,
            intent_count=len(Intent),
        )

    def build_retry_prompt(  # [IL-D002.3]
        self,
        message: str,
        prior_attempts: Sequence[AttemptRecord],
        expected_intent: Intent,
    ) -> str:
        """재분석 프롬프트. 이전 분류 결과와 기대 의도를 명시합니다."""
        previous = ", ".join(str(a.result.intent) for a in prior_attempts) or "ninguna"
        return RETRY_TEMPLATE.format(
            message=message,
            previous=previous,
            expected=Intent(expected_intent).value,
            intents=_intent_lines(),
            response_format=RESPONSE_FORMAT,
        )

    @staticmethod
    def avoided_intents(  # [IL-D002.4]
        prior_attempts: Sequence[AttemptRecord],
        expected_intent: Intent | None = None,
    ) -> list[Intent]:
        """이전 시도에서 나온 의도 (등장 순, 중복/에러 마커/기대 의도 제외)."""
        avoided: list[Intent] = []
        for attempt in prior_attempts:
            intent = attempt.result.intent
            if intent == ERROR_INTENT or intent == expected_intent or intent in avoided:
                continue
            avoided.append(Intent(intent))
        return avoided

    def _retry_context(
        self,
        prior_attempts: Sequence[AttemptRecord],
        expected_intent: Intent | None,
    ) -> str:
        if not prior_attempts:
            return ""

        last = prior_attempts[-1].result.intent
        lines = [
            "",
            "CONTEXTO DE REINTENTO:",
            f'En la clasificación anterior el mensaje se interpretó como "{last}",',
            "pero necesitamos reevaluarlo con más precisión.",
        ]
        avoided = self.avoided_intents(prior_attempts, expected_intent)
        if avoided:
            names = ", ".join(i.value for i in avoided)
            lines.append(f"EVITA repetir estas intenciones si no son claramente correctas: {names}")
        lines.append("")
        return "\n".join(lines)


def _intent_lines() -> str:
    return "\n".join(f"- {intent.value}: {desc}" for intent, desc in INTENT_DESCRIPTIONS.items())
