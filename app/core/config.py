"""Application configuration"""
import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Database Configuration
    DATABASE_USER = os.getenv("DATABASE_USER", "postgres")
    DATABASE_PASSWORD = os.getenv("DATABASE_PASSWORD", "123456")
    DATABASE_HOST = os.getenv("DATABASE_HOST", "localhost")
    DATABASE_PORT = os.getenv("DATABASE_PORT", "5432")
    DATABASE_NAME = os.getenv("DATABASE_NAME", "buzzpay_db")
    DATABASE_URL_OVERRIDE = os.getenv("DATABASE_URL")

    @property
    def DATABASE_URL(self) -> str:
        """Full DATABASE_URL if given, otherwise a PostgreSQL URL from parts"""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"

    # Connection pool: callers wait up to DB_POOL_TIMEOUT seconds for a free connection
    DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 10))
    DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", 30))

    # Logging Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR = os.getenv("LOG_DIR", "app/logs")

    # Development/Production Settings
    ENVIRONMENT = os.getenv("ENVIRONMENT", "production")
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"

    # Return the OTP in the send-otp response (operator diagnostics only)
    EXPOSE_OTP_IN_RESPONSE = os.getenv(
        "EXPOSE_OTP_IN_RESPONSE", "true" if ENVIRONMENT == "development" else "false"
    ).lower() == "true"

    # Project Metadata
    PROJECT_NAME = "Buzzpay API"
    PROJECT_VERSION = "1.0.0"
    API_PREFIX = "/api"

    # JWT Authentication
    SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-this-in-production-min-32-chars")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    REGISTER_TOKEN_EXPIRE_MINUTES = int(os.getenv("REGISTER_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))  # 7 days
    LOGIN_TOKEN_EXPIRE_MINUTES = int(os.getenv("LOGIN_TOKEN_EXPIRE_MINUTES", 60 * 24 * 30))  # 30 days

    # Password hashing cost (bcrypt log rounds)
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 10))

    # Login lockout
    MAX_LOGIN_ATTEMPTS = int(os.getenv("MAX_LOGIN_ATTEMPTS", 5))
    LOCKOUT_MINUTES = int(os.getenv("LOCKOUT_MINUTES", 15))

    # SMTP / Email configuration
    SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
    SMTP_USER = os.getenv("SMTP_USER", "")
    SMTP_PASS = os.getenv("SMTP_PASS", "")
    EMAIL_FROM = os.getenv("EMAIL_FROM", "noreply@buzzpay.app")

    # OTP expiry (minutes)
    OTP_EXPIRE_MINUTES = int(os.getenv("OTP_EXPIRE_MINUTES", 10))

    # Registration
    MAX_IDENTIFIER_ATTEMPTS = int(os.getenv("MAX_IDENTIFIER_ATTEMPTS", 10))
    REFERRAL_BONUS = Decimal(os.getenv("REFERRAL_BONUS", "50.00"))


settings = Settings()
