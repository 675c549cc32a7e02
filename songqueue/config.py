"""
Configuration management for SongQueue API
Loads settings from environment variables
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # File Upload
    UPLOAD_DIR: str = "./uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_FILE_SIZE: int = 52428800  # 50MB
    ALLOWED_MEDIA_TYPES: str = "image/,audio/,video/"

    # API Configuration
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "SongQueue API"
    VERSION: str = "1.0.0"

    # CORS
    BACKEND_CORS_ORIGINS: str = '["http://localhost:3000"]'

    # Supabase Auth (OAuth identity provider)
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    OAUTH_TIMEOUT: int = 10

    # Skip-the-line payment proofs
    PAYMENT_PROOF_SECRET: str = ""
    PAYMENT_PROOF_ALGORITHM: str = "HS256"
    PAYMENT_PROOF_MAX_AGE_SECONDS: int = 900

    # Queue writes
    QUEUE_WRITE_RETRIES: int = 3

    # Application
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow"
    )

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from JSON string"""
        try:
            return json.loads(self.BACKEND_CORS_ORIGINS)
        except ValueError:
            return ["http://localhost:3000"]

    @property
    def allowed_media_type_prefixes(self) -> List[str]:
        """Get allowed media type prefixes as a list"""
        return [prefix.strip() for prefix in self.ALLOWED_MEDIA_TYPES.split(',') if prefix.strip()]


# Global settings instance
settings = Settings()
