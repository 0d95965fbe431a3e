"""
[IL-C000] intentloop.llm
LiteLLM 라우터
"""
