from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from config.settings import settings
from database.db import init_db

# ✅ 로그 설정 (레벨은 환경변수 LOG_LEVEL)
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# HTTP 라이브러리 / SQL 디버그 로그 비활성화
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


# ✅ 미들웨어 임포트
from middlewares.timing import TimingMiddleware
from middlewares.error_handler import add_error_handlers

# ✅ 라우터 임포트
from routers import (
    courses, semesters, classes, students, enrollments, rooms,
    grade_components, grade_entries, grade_scales, grades,
    exams, audit_logs,
)

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION
)

# ✅ CORS 설정 (허용 도메인은 환경변수 CORS_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ✅ 요청 지연 측정 미들웨어 (응답 헤더 X-Latency-Ms 추가)
app.add_middleware(TimingMiddleware)

# ✅ 전역 에러 핸들러 등록 (일관된 JSON 에러 포맷)
add_error_handlers(app)

# ✅ /v1 프리픽스 라우터 등록
app.include_router(courses.router,           prefix="/v1")
app.include_router(semesters.router,         prefix="/v1")
app.include_router(classes.router,           prefix="/v1")
app.include_router(students.router,          prefix="/v1")
app.include_router(enrollments.router,       prefix="/v1")
app.include_router(rooms.router,             prefix="/v1")
app.include_router(grade_components.router,  prefix="/v1")   # ✅ 성적 구성요소
app.include_router(grade_entries.router,     prefix="/v1")   # ✅ 점수 입력
app.include_router(grade_scales.router,      prefix="/v1")   # ✅ 등급 체계
app.include_router(grades.router,            prefix="/v1")   # ✅ 성적 계산/확정/GPA
app.include_router(exams.router,             prefix="/v1")   # ✅ 시험 일정
app.include_router(audit_logs.router,        prefix="/v1")

# ✅ 헬스체크 엔드포인트
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "API is running", "env": settings.ENV}

@app.on_event("startup")
def _create_tables():
    # 테이블이 없으면 생성 (운영 스키마 변경은 별도 마이그레이션)
    init_db()
    logger.info(f"{settings.APP_TITLE} 시작 (env={settings.ENV})")

# ✅ 루트 엔드포인트
@app.get("/")
def root():
    return {"message": f"{settings.APP_TITLE} - 성적 관리 / 시험 일정 백엔드"}
