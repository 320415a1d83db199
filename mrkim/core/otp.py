import secrets
from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext

from .config import settings

OTP_MIN = 100000
OTP_MAX = 999999

otp_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.OTP_HASH_ROUNDS)


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_otp() -> str:
    """Generate a 6-digit OTP code from the system CSPRNG."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def hash_otp(code: str) -> str:
    return otp_context.hash(code)


def verify_otp_hash(code: str, code_hash: str) -> bool:
    return otp_context.verify(code, code_hash)


def otp_expiration(now: datetime | None = None) -> datetime:
    return (now or utcnow()) + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
