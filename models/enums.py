from enum import Enum


# ✅ 성적 구성요소 유형
class GradeComponentType(str, Enum):
    MIDTERM = "MIDTERM"
    FINAL = "FINAL"
    QUIZ = "QUIZ"
    ASSIGNMENT = "ASSIGNMENT"
    PROJECT = "PROJECT"
    PARTICIPATION = "PARTICIPATION"
    LAB = "LAB"
    OTHER = "OTHER"


# ✅ 수강 상태
class EnrollmentStatus(str, Enum):
    REGISTERED = "REGISTERED"
    DROPPED = "DROPPED"
    WITHDRAWN = "WITHDRAWN"
    COMPLETED = "COMPLETED"


# ✅ 시험 유형
class ExamType(str, Enum):
    MIDTERM = "MIDTERM"
    FINAL = "FINAL"
    QUIZ = "QUIZ"
    MAKEUP = "MAKEUP"


# ✅ 시험 상태 (SCHEDULED → COMPLETED / CANCELLED, 이후 종료 상태)
class ExamStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# ✅ 감사 로그 액션
class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
