from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routes import design
from .routes.design import CORS_HEADERS
from .config import settings
from .services.errors import DesignServiceError
from .utils.logger import logger

logger.info(f"Starting {settings.app_name} v{settings.app_version}")

# FastAPI 앱 생성
app = FastAPI(
    title=settings.app_name,
    description="AI 방 인테리어 디자인 생성 및 추천 API",
    version=settings.app_version,
    debug=settings.debug
)

# CORS 설정 (환경변수 기반, 기본값은 모든 origin 허용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info(f"CORS enabled for origins: {settings.cors_origins}")

# 라우터 등록
app.include_router(design.router)


@app.exception_handler(DesignServiceError)
async def design_service_error_handler(request: Request, exc: DesignServiceError):
    """서비스 예외 → {"error": ...} + 매핑된 상태 코드"""
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=CORS_HEADERS)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": str(exc) or "An unexpected error occurred",
            "details": "Please try again or contact support if the issue persists",
        },
        headers=CORS_HEADERS,
    )


@app.get("/health")
async def health_check():
    """헬스 체크 및 시스템 상태"""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "ai_gateway_configured": bool(settings.lovable_api_key),
        "fallback_configured": bool(settings.openai_api_key),
        "config": {
            "image_model": settings.image_model,
            "timeout_seconds": settings.gateway_timeout_seconds
        }
    }


@app.on_event("startup")
async def startup_event():
    """애플리케이션 시작 시 실행"""
    logger.info("="*50)
    logger.info("Application startup")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"AI Gateway configured: {bool(settings.lovable_api_key)}")
    logger.info(f"Fallback provider configured: {bool(settings.openai_api_key)}")
    logger.info("="*50)


@app.on_event("shutdown")
async def shutdown_event():
    """애플리케이션 종료 시 실행"""
    logger.info("Application shutdown")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
