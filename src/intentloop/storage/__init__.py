"""
[IL-E000] intentloop.storage
상호작용 기록 저장소
"""
