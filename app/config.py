"""애플리케이션 설정"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """환경변수 기반 설정"""

    # API Keys (없으면 요청 시점에 ConfigurationError)
    lovable_api_key: str = ""
    openai_api_key: str = ""

    # Application
    app_name: str = "Room Design API"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS
    cors_origins: List[str] = ["*"]

    # File Upload
    max_upload_size_mb: int = 10

    # AI Gateway (primary)
    ai_gateway_url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    image_model: str = "google/gemini-2.5-flash-image-preview"
    gateway_timeout_seconds: int = 120

    # Fallback provider (402 응답 시 1회만 사용)
    fallback_image_url: str = "https://api.openai.com/v1/images/edits"
    fallback_chat_url: str = "https://api.openai.com/v1/chat/completions"
    fallback_image_model: str = "dall-e-2"
    fallback_text_model: str = "gpt-4o-mini"
    fallback_image_size: str = "1024x1024"

    # Supabase (studio 클라이언트용)
    supabase_url: str = "http://127.0.0.1:54321"
    supabase_anon_key: str = ""
    api_base_url: str = "http://localhost:8000"

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


# 전역 설정 인스턴스
settings = Settings()
