"""
MHD 트래커 -- 입고 배치별 유통기한(MHD) 추적 및 임박/경과 알림
"""

__version__ = "1.0.0"
