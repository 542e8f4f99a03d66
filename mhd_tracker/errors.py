"""
MHD 트래커 예외 클래스

모든 예외는 TrackerError를 상속한다.
호출자에게 동기적으로 전달되며 자동 재시도는 하지 않는다.
"""


class TrackerError(Exception):
    """트래커 관련 예외"""
    pass


class ItemValidationError(TrackerError):
    """상품 입력값 검증 실패 (이름/유통기한 누락)"""

    def __init__(self, message: str, field: str = ""):
        super().__init__(message)
        self.field = field


class ItemNotFoundError(TrackerError):
    """존재하지 않는 상품 ID"""
    pass


class PersistenceError(TrackerError):
    """저장소 쓰기 실패 (메모리 상태는 유지됨)"""

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key


class ImportPayloadError(TrackerError):
    """가져오기 데이터 형식 오류 (아무것도 변경되지 않음)"""
    pass
