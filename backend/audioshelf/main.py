"""
FastAPI Main Entry

AudioShelf - 个人有声书库 API 服务：章节流式播放与按会话续播。
"""
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from audioshelf.config import APP_NAME, APP_VERSION, API_HOST, API_PORT, API_PREFIX, CORS_ORIGINS, DEBUG
from audioshelf.exceptions import (
    AudioShelfError,
    NotFoundError,
    UpstreamFailure,
    ValidationFailure,
)

logger = logging.getLogger(__name__)


# ==================== Create FastAPI App ====================
app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    debug=DEBUG,
    description="""
    AudioShelf API

    个人有声书库：管理员上传多章节有声书，用户浏览、搜索并流式收听，按会话记录续播位置。

    ## 主要功能
    * **书籍目录**: 列表、搜索、详情
    * **播放地址**: 按章节签发限时播放地址
    * **播放进度**: 按 (sessionId, bookId) 保存与读取续播位置
    * **管理端**: 登录、上传地址、书籍增删改
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    contact={
        "name": "AudioShelf",
    },
)


# ==================== Configure CORS ====================
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Import and Register Routers ====================
from audioshelf.api import admin, books

app.include_router(books.router, prefix=API_PREFIX, tags=["books"])
app.include_router(admin.auth_router, prefix=API_PREFIX, tags=["admin"])
app.include_router(admin.router, prefix=API_PREFIX, tags=["admin"])


# ==================== Root Endpoint ====================
@app.get("/", tags=["Root"])
async def root():
    """API 服务根路径"""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "redoc": "/redoc",
    }


# ==================== Health Check ====================
@app.get("/health", tags=["Root"])
async def health_check():
    """健康检查端点"""
    return {
        "status": "healthy",
        "service": APP_NAME,
        "version": APP_VERSION,
    }


# ==================== Global Exception Handlers ====================
def _error_response(status_code: int, exc: AudioShelfError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": str(exc),
            "error_type": exc.error_type,
        },
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request, exc):
    """资源不存在"""
    return _error_response(404, exc)


@app.exception_handler(ValidationFailure)
async def validation_failure_handler(request, exc):
    """业务校验失败"""
    return _error_response(400, exc)


@app.exception_handler(UpstreamFailure)
async def upstream_failure_handler(request, exc):
    """对象存储/数据库暂不可用（可重试）"""
    logger.warning(f"Upstream failure on {request.url.path}: {exc}")
    return _error_response(503, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc):
    """请求参数校验失败（统一返回 400）"""
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Invalid request",
            "error_type": ValidationFailure.error_type,
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request, exc):
    """数据库异常处理"""
    logger.error(f"Database error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Database error occurred",
            "error_type": "database_error",
            "message": str(exc) if app.debug else "Internal database error",
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """通用异常处理"""
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_type": "internal_error",
            "message": str(exc) if app.debug else "An unexpected error occurred",
        },
    )


# ==================== Startup Event ====================
@app.on_event("startup")
async def startup_event():
    """应用启动时执行：配置日志并确保数据表存在"""
    from audioshelf.database import create_tables
    from audioshelf.utils.logging_setup import setup_logging

    setup_logging()
    create_tables()
    logger.info(f"{APP_NAME} API v{APP_VERSION} listening on http://{API_HOST}:{API_PORT}{API_PREFIX}")


# ==================== Run Server (Development) ====================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "audioshelf.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=True,
        log_level="info",
    )
