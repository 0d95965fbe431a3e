"""
[IL-D000] intentloop.classification
의도분류 코어: 프롬프트 구성, 게이트웨이, 추정기, 재시도 오케스트레이터
"""
