from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Any
from urllib.parse import quote_plus
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


def parse_content_types(v: Any) -> List[str]:
    """Parse allowed MIME types from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [ct.strip().lower() for ct in v.split(',') if ct.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "CMIS Student Portal"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # Largest request body accepted before the handler runs (multipart overhead included)
    MAX_REQUEST_SIZE: int = 25 * 1024 * 1024

    # ==========================================
    # Database
    # ==========================================
    # Full URL wins; otherwise the URL is assembled from the DB_* parts below
    DATABASE_URL: str = ""
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "postgres"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_SSL: bool = False

    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 0
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    @property
    def effective_database_url(self) -> str:
        """Database URL with the async driver selected"""
        db_url = self.DATABASE_URL
        if not db_url:
            db_url = (
                f"postgresql+asyncpg://{quote_plus(self.DB_USER)}:{quote_plus(self.DB_PASSWORD)}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            )
        if db_url.startswith("postgresql://"):
            db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return db_url

    # ==========================================
    # Object Storage (S3)
    # ==========================================
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_S3_BUCKET_NAME: str = ""
    S3_ENDPOINT_URL: str = ""  # Empty means AWS; set for MinIO/localstack

    RESUME_FOLDER: str = "resumes"
    RESUME_UPLOAD_URL_EXPIRY: int = 518400  # 6 days (SigV4 presigned URLs max out at 7)
    PRESIGNED_URL_EXPIRY: int = 3600  # 1 hour
    MAX_RESUME_SIZE: int = 10 * 1024 * 1024  # 10MB
    ALLOWED_RESUME_TYPES_STR: str = (
        "application/pdf,"
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    )

    @property
    def ALLOWED_RESUME_TYPES(self) -> List[str]:
        """Parse allowed resume MIME types from comma-separated string"""
        return parse_content_types(self.ALLOWED_RESUME_TYPES_STR)

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str = ""
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720  # 12 hours
    BCRYPT_ROUNDS: int = 10

    # ==========================================
    # Registration
    # ==========================================
    # "open": self-registration inserts new rows, duplicates are 409
    # "preprovisioned": admin-created rows are completed, unknown students are 404
    REGISTRATION_MODE: str = "open"

    @field_validator("REGISTRATION_MODE")
    @classmethod
    def validate_registration_mode(cls, v: str) -> str:
        mode = v.strip().lower()
        if mode not in ("open", "preprovisioned"):
            raise ValueError("REGISTRATION_MODE must be 'open' or 'preprovisioned'")
        return mode

    # ==========================================
    # Automation webhook (n8n)
    # ==========================================
    N8N_WEBHOOK_URL: str = ""
    WEBHOOK_TIMEOUT_SECONDS: float = 10.0
    WEBHOOK_SOURCE: str = "cmis-student-portal"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    @property
    def expose_error_details(self) -> bool:
        """Raw driver/upstream error text is only returned in development"""
        return self.ENVIRONMENT == "development"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
