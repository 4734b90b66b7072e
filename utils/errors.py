"""
utils/errors.py

- 서비스 계층에서 발생시키는 도메인 예외 모음
- middlewares/error_handler.py 에서 HTTP 상태코드 + 표준 에러 JSON으로 변환됨
"""


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "Internal Server Error", status_code: int = None, code: str = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ValidationError(AppError):
    """잘못된 요청 (가중치 초과, 잘못된 시간 형식, 상태 전이 불가 등)"""
    status_code = 400
    code = "BAD_REQUEST"


class ConflictError(AppError):
    """중복 이름, 기존 데이터와 충돌 (점수가 있는 구성요소 삭제 등)"""
    status_code = 409
    code = "CONFLICT"


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"
