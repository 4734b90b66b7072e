"""
utils/scheduling.py

- 시험 일정 충돌 검사에 쓰는 시간/날짜 헬퍼
- 시각은 "HH:MM" 문자열, 구간은 반개구간 [start, end)
"""

import re
from datetime import date, datetime, timezone
from typing import Union

from utils.errors import ValidationError

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_hhmm(value: str) -> int:
    """ "HH:MM" → 자정 기준 분(minute). 형식이 틀리면 ValidationError """
    if not isinstance(value, str):
        raise ValidationError(f"Time must be in HH:MM format: {value!r}")
    match = HHMM_PATTERN.match(value)
    if not match:
        raise ValidationError(f"Time must be in HH:MM format: {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def validate_time_range(start_time: str, end_time: str) -> int:
    """시작/종료 시각을 검증하고 구간 길이(분)를 반환"""
    start = parse_hhmm(start_time)
    end = parse_hhmm(end_time)
    if end <= start:
        raise ValidationError(f"End time ({end_time}) must be after start time ({start_time})")
    return end - start


def intervals_overlap(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    # 두 구간은 서로가 상대의 끝보다 먼저 시작할 때만 겹침 (경계가 맞닿는 경우는 제외)
    return parse_hhmm(a_start) < parse_hhmm(b_end) and parse_hhmm(a_end) > parse_hhmm(b_start)


def normalize_exam_date(value: Union[date, datetime, str]) -> date:
    """날짜를 UTC 자정 기준 달력 날짜로 정규화 (시간 정보 제거)"""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"Invalid date: {value!r}")

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()

    if isinstance(value, date):
        return value

    raise ValidationError(f"Invalid date: {value!r}")
