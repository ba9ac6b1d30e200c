from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "Harbor Notifications"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 2  # 2 days

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./harbor.db"
    TEST_DATABASE_URL: Optional[str] = None

    # Realtime pub/sub. Empty means realtime delivery is disabled.
    REALTIME_REDIS_URL: str = ""
    REALTIME_CHANNEL_PREFIX: str = "harbor"

    # Notification fan-out
    NOTIFICATION_WORKERS: int = 8

    # PandaDoc e-signature
    PANDADOC_API_KEY: str = ""
    PANDADOC_WEBHOOK_KEY: str = ""
    PANDADOC_BASE_URL: str = "https://api.pandadoc.com/public/v1"
    PANDADOC_SIGNING_BASE_URL: str = "https://app.pandadoc.com/s"
    PANDADOC_NDA_SUBJECT: str = "NDA - Harbor Partners"
    # Template used for new NDA documents; empty disables signing sessions
    PANDADOC_NDA_TEMPLATE_ID: str = ""

    LOG_DIR: str = "logs"

    class Config:
        env_file = ".env"

settings = Settings()
