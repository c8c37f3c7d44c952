from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "MicroCourse API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./microcourse.db"
    TEST_DATABASE_URL: Optional[str] = None
    CREATE_TABLES_ON_STARTUP: bool = False

    # Bootstrap admin, created on startup when set
    FIRST_ADMIN_EMAIL: Optional[str] = None
    FIRST_ADMIN_PASSWORD: Optional[str] = None
    FIRST_ADMIN_NAME: str = "Platform Admin"

    # Media storage. Cloudinary is used when all three are set, local disk otherwise.
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_FOLDER: str = "microcourse"
    UPLOAD_DIR: str = "uploads"
    MAX_VIDEO_SIZE: int = 100 * 1024 * 1024  # 100MB
    MAX_IMAGE_SIZE: int = 10 * 1024 * 1024  # 10MB

    # Transcript generation
    TRANSCRIPT_SERVICE_URL: Optional[str] = None
    TRANSCRIPT_SERVICE_API_KEY: Optional[str] = None
    TRANSCRIPT_TIMEOUT_SECONDS: float = 30.0

    # Certificates
    PLATFORM_NAME: str = "MicroCourse Learning Platform"

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    @property
    def cloudinary_enabled(self) -> bool:
        return bool(self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET)

    class Config:
        env_file = ".env"

settings = Settings()
