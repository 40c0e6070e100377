"""
월마감 예외

모든 예외는 code(ErrorCode)와 message를 가지며,
Web 레이어는 http_status로 응답 코드를 결정한다.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """월마감 에러 코드"""

    VALIDATION = "VALIDATION"
    UNAUTHORIZED = "UNAUTHORIZED"
    ALREADY_SETTLED = "ALREADY_SETTLED"
    NOT_SETTLED = "NOT_SETTLED"
    CONFLICT = "CONFLICT"
    STORAGE_ERROR = "STORAGE_ERROR"


class SettlementError(Exception):
    """월마감 예외 기본 클래스"""

    code: ErrorCode = ErrorCode.STORAGE_ERROR
    http_status: int = 500

    def __init__(self, message: str, code: ErrorCode | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, str]:
        """에러 응답 본문"""
        return {"code": self.code.value, "message": self.message}


class SettlementValidationError(SettlementError):
    """입력값 오류 (잘못된 월 등)"""

    code = ErrorCode.VALIDATION
    http_status = 400


class UnauthorizedError(SettlementError):
    """사용자 식별 불가"""

    code = ErrorCode.UNAUTHORIZED
    http_status = 401


class AlreadySettledError(SettlementError):
    """이미 정산된 월"""

    code = ErrorCode.ALREADY_SETTLED
    http_status = 409


class NotSettledError(SettlementError):
    """정산되지 않은 월 (취소 불가)"""

    code = ErrorCode.NOT_SETTLED
    http_status = 409


class SettlementConflictError(SettlementError):
    """동시 요청 충돌 (정산 레코드 version 불일치)"""

    code = ErrorCode.CONFLICT
    http_status = 409


class SettlementStorageError(SettlementError):
    """저장소 오류"""

    code = ErrorCode.STORAGE_ERROR
    http_status = 500
