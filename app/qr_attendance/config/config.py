import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """
    Keeps the station settings read straight from environment variables.
    """
    # Remote roster/attendance plugin
    SYNC_API_BASE_URL: str = os.environ.get("SYNC_API_BASE_URL", "http://localhost:8001/wp-json/custom-sync/v1")
    SYNC_REQUEST_TIMEOUT_SECONDS: float = float(os.environ.get("SYNC_REQUEST_TIMEOUT_SECONDS", 15))

    # Redis
    APPLICATION_REDIS_URL: str = os.environ.get("APPLICATION_REDIS_URL", "redis://localhost:6379/0")
    RATE_LIMITER_REDIS_URL: str = os.environ.get("RATE_LIMITER_REDIS_URL", "memory://")

    # JWT and station accounts
    SECRET_KEY: str = os.environ.get("SECRET_KEY", "change-me")
    ALGORITHM: str = os.environ.get("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 720))
    SUPERUSER_EMAIL: str = os.environ.get("SUPERUSER_EMAIL")
    SUPERUSER_PASSWORD: str = os.environ.get("SUPERUSER_PASSWORD")

    # Attendance behaviour
    AUTO_SYNC_INTERVAL_MINUTES: int = int(os.environ.get("AUTO_SYNC_INTERVAL_MINUTES", 0))
    TEACHER_SCAN_UPLOAD_MODE: str = os.environ.get("TEACHER_SCAN_UPLOAD_MODE", "deferred")

    APP_VERSION: str = os.environ.get("APP_VERSION", "2.2")

    # Logging
    LOG_DIR: str = os.environ.get("LOG_DIR", "logs")
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FILE_NAME: str = os.environ.get("LOG_FILE_NAME", "station.log")
    LOG_MAX_BYTES: int = int(os.environ.get("LOG_MAX_BYTES", 5 * 1024 * 1024))
    LOG_BACKUP_COUNT: int = int(os.environ.get("LOG_BACKUP_COUNT", 5))
    RATE_LIMIT_ENABLED: bool = os.environ.get("RATE_LIMIT_ENABLED", "true").lower() != "false"

# Single importable instance of the settings
settings = Config()
