from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Booking Backend"
    API_PREFIX: str = "/api"

    # Server
    PORT: int = 10000
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    ERROR_LOG_FILE: str = "logs/errors.log"

    # Supabase
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    BOOKINGS_TABLE: str = "bookings"

    # Mail
    SMTP_SERVER: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    EMAIL_USER: str = ""
    EMAIL_PASS: str = ""
    BUSINESS_NAME: str = "Nova's Auto Center"
    ADMIN_EMAIL: str = ""

    # Admin auth
    ADMIN_LOGIN_EMAIL: str = ""
    ADMIN_LOGIN_PASSWORD: str = ""
    JWT_SECRET: str = ""
    TOKEN_TTL_HOURS: int = 4

    class Config:
        env_file = ".env"
        case_sensitive = True
