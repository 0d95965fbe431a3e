"""
[IL-0000] intentloop
LLM 기반 고객 메시지 의도분류 — 제한된 재시도 오케스트레이터

version: 0.3.0
created: 2026-10-02
modified: 2026-10-17
"""

__version__ = "0.3.0"
