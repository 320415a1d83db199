import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()

class Settings:
    APP_NAME: str = "Mr. Kim Auth Backend"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    SQLALCHEMY_DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./mrkim.db")

    # Session token (JWT in an httpOnly cookie, also accepted as Bearer)
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "change_this_secret")
    JWT_ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "mrkim-session")
    SESSION_MAX_AGE_DAYS: int = int(os.getenv("SESSION_MAX_AGE_DAYS", "7"))

    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # Brevo Email API
    BREVO_API_KEY: str = os.getenv("BREVO_API_KEY", "")
    EMAIL_FROM_ADDRESS: str = os.getenv("EMAIL_FROM_ADDRESS", "noreply@mrkim.com")
    EMAIL_FROM_NAME: str = os.getenv("EMAIL_FROM_NAME", "Mr. Kim")

    # Twilio SMS API
    TWILIO_ACCOUNT_SID: str = os.getenv("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN: str = os.getenv("TWILIO_AUTH_TOKEN", "")
    TWILIO_SENDER_ID: str = os.getenv("TWILIO_SENDER_ID", "")

    OTP_EXPIRE_MINUTES: int = int(os.getenv("OTP_EXPIRE_MINUTES", "10"))
    OTP_HASH_ROUNDS: int = int(os.getenv("OTP_HASH_ROUNDS", "10"))
    OTP_MAX_ATTEMPTS: int = int(os.getenv("OTP_MAX_ATTEMPTS", "5"))

    # Bootstrap admin, only seeded when both are set
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

settings = Settings()

def session_expires():
    return timedelta(days=settings.SESSION_MAX_AGE_DAYS)
