# casenotes/core/config.py
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class Settings(BaseSettings):
    """Application settings, read from the environment or `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./casenotes.db"
    SQL_ECHO: bool = False

    # Attachment storage
    STORAGE_BACKEND: str = Field("local", description="`local` or `s3`")
    UPLOAD_DIR: str = "./uploads"
    S3_BUCKET: Optional[str] = None
    S3_ENDPOINT: Optional[str] = None
    S3_ACCESS_KEY: Optional[str] = None
    S3_SECRET_KEY: Optional[str] = None
    S3_PREFIX: str = "attachments/"

    # Upload validation
    MAX_UPLOAD_SIZE_BYTES: int = 10 * 1024 * 1024
    MAX_FILES_PER_UPLOAD: int = 5
    ALLOWED_UPLOAD_TYPES: List[str] = [
        "application/pdf",
        DOCX_MIME_TYPE,
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    ]

    # Listing
    DEFAULT_PAGE_SIZE: int = 10

    # Identity headers forwarded by the authenticating proxy
    AUTH_USER_ID_HEADER: str = "X-User-Id"
    AUTH_EMAIL_HEADER: str = "X-User-Email"
    AUTH_FIRST_NAME_HEADER: str = "X-User-First-Name"
    AUTH_LAST_NAME_HEADER: str = "X-User-Last-Name"

    # Application
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]


settings = Settings()
