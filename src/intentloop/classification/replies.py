"""
[IL-D006] intentloop.classification.replies
의도별 빠른 응답 문구

version: 1.0.0
created: 2026-10-05
modified: 2026-10-05
"""

from __future__ import annotations

from intentloop.core.types import FALLBACK_INTENT, Intent

QUICK_REPLIES: dict[Intent, str] = {
    Intent.TRACKING: "Te ayudo con el seguimiento de tu envío...",
    Intent.CONSULT_ORDER: "Voy a consultar el estado de tu pedido...",
    Intent.COMPLAINT: "Lamento lo ocurrido. Te ayudo con tu reclamo...",
    Intent.SALES: "Te comparto información sobre nuestros productos y precios...",
    Intent.SUPPORT: "Te ayudo con el soporte técnico...",
    Intent.INFO_GENERAL: "Te ayudo con tu consulta...",
}


def quick_reply(intent: Intent | str) -> str:  # [IL-D006.1]
    """의도에 맞는 응답 문구. 알 수 없는 의도는 info_general 문구."""
    parsed = Intent.parse(intent)
    return QUICK_REPLIES[parsed or FALLBACK_INTENT]
