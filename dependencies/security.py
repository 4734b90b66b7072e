from typing import Optional, Annotated
from fastapi import Header

from utils.errors import ValidationError, ForbiddenError

# 인증은 앞단 게이트웨이에서 처리하고, 처리자 ID만 헤더로 전달받음
UserIdHeader = Annotated[Optional[str], Header(alias="X-User-Id")]


def get_current_user_id(x_user_id: UserIdHeader = None) -> Optional[int]:
    # 헤더가 없으면 익명 요청 (감사 로그 미기록)
    if x_user_id is None or not x_user_id.strip():
        return None

    try:
        user_id = int(x_user_id.strip())
    except ValueError:
        raise ValidationError("Invalid X-User-Id header")

    if user_id <= 0:
        raise ValidationError("Invalid X-User-Id header")
    return user_id


def require_user_id(x_user_id: UserIdHeader = None) -> int:
    # 성적 확정 취소 등 처리자 기록이 반드시 필요한 작업용
    user_id = get_current_user_id(x_user_id)
    if user_id is None:
        raise ForbiddenError("This operation requires an acting user (X-User-Id)")
    return user_id
