from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from urllib.parse import quote_plus


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file="goldapi/.env",
        env_file_encoding="utf-8",
        extra="allow",
    )
    # Application
    APP_NAME: str = "Gold Scheme API"
    PROJECT_NAME: str = "Gold Savings Scheme API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    FRONTEND_URL: str = "http://localhost:3000"

    # Database
    POSTGRES_HOST: str = ""
    POSTGRES_PORT: int = 5432
    POSTGRES_USERNAME: str = ""
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DATABASE: str = ""

    # 직접 지정하면 POSTGRES_* 보다 우선
    DATABASE_URL: Optional[str] = None
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    @property
    def database_url(self) -> str:
        """Construct database URL from individual components"""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        # URL encode the password to handle special characters
        encoded_password = quote_plus(self.POSTGRES_PASSWORD)
        return f"postgresql+psycopg2://{self.POSTGRES_USERNAME}:{encoded_password}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DATABASE}"

    # Security
    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440

    # AWS
    AWS_REGION: str = "ap-south-1"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    S3_BUCKET_NAME: str = ""
    S3_UPLOAD_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB
    S3_UPLOAD_EXPIRES_SECONDS: int = 300
    S3_DOWNLOAD_EXPIRES_SECONDS: int = 3600
    SES_FROM_EMAIL: str = "no-reply@example.com"

    # Business Rules (Settings 테이블에 값이 없을 때의 기본값)
    DEFAULT_REDEMPTION_WINDOW: int = 5
    DEFAULT_MINIMUM_REDEMPTION_POINTS: int = 100
    RECALCULATION_BATCH_SIZE: int = 100

    # Scheduler
    SCHEDULER_ENABLED: bool = False
    POINTS_RECALCULATION_CRON: str = "0 2 * * *"
    MATURITY_REDEMPTION_CRON: str = "0 23 * * *"

    # Timezone
    TIMEZONE: str = "Asia/Kolkata"


settings = Settings()
