import enum
from datetime import datetime

from sqlalchemy import Integer, String, DateTime, Boolean, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from ..core.otp import utcnow


class OTPType(str, enum.Enum):
    EMAIL = "EMAIL"
    PHONE = "PHONE"


class OTPRecord(Base):
    """One issued passcode. Only the bcrypt hash of the code is stored."""
    __tablename__ = "otp_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Empty for phone sign-up codes, linked once the account exists
    user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    identifier: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[OTPType] = mapped_column(Enum(OTPType), nullable=False)
    code_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    consumed: Mapped[bool] = mapped_column(Boolean, default=False)
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
