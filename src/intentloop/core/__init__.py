"""
[IL-A000] intentloop.core
공통 설정, 타입, 모델, 예외
"""
