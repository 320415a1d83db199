# OTP Service - issue and verify one-time passcodes bound to an email or phone

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..core import otp as otp_utils
from ..core.config import settings
from ..core.errors import (
    ConflictError,
    InvalidCodeError,
    InvalidOrExpiredError,
    NotFoundError,
    ValidationError,
)
from ..models.otp import OTPRecord, OTPType
from ..models.user import SELF_SERVICE_ROLES, Role, User

logger = logging.getLogger(__name__)


@dataclass
class Verified:
    """Code accepted for an existing account."""
    user: User


@dataclass
class VerifiedAndCreated:
    """Code accepted and a new phone-first account was created for it."""
    user: User


VerificationResult = Union[Verified, VerifiedAndCreated]


def _identifier_column(channel: OTPType):
    return User.email if channel == OTPType.EMAIL else User.phone


def _field_name(channel: OTPType) -> str:
    return "Email" if channel == OTPType.EMAIL else "Phone number"


def find_user(db: Session, identifier: str, channel: OTPType) -> Optional[User]:
    return db.query(User).filter(_identifier_column(channel) == identifier).first()


def is_verified(user: User, channel: OTPType) -> bool:
    return user.email_verified if channel == OTPType.EMAIL else user.phone_verified


def require_unverified_user(db: Session, identifier: Optional[str], channel: OTPType) -> User:
    """Precondition for the resend-verification flows."""
    if not identifier:
        raise ValidationError(f"{_field_name(channel)} is required")

    user = find_user(db, identifier, channel)
    if not user:
        raise NotFoundError("User not found")
    if is_verified(user, channel):
        raise ConflictError(f"{'Email' if channel == OTPType.EMAIL else 'Phone'} already verified")
    return user


def issue_otp(
    db: Session,
    identifier: Optional[str],
    channel: OTPType,
    user_id: Optional[int] = None,
) -> Tuple[OTPRecord, str]:
    """
    Create and store a new OTP for the identifier.

    Every call inserts a fresh record; older outstanding codes are left to
    expire. Returns the stored record and the plaintext code, which must only
    be handed to the notification sender.
    """
    if not identifier:
        raise ValidationError(f"{_field_name(channel)} is required")

    code = otp_utils.generate_otp()
    record = OTPRecord(
        user_id=user_id,
        identifier=identifier,
        type=channel,
        code_hash=otp_utils.hash_otp(code),
        expires_at=otp_utils.otp_expiration(),
        consumed=False,
        attempts=0,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    logger.info(f"Issued {channel.value} OTP #{record.id} for {identifier}")
    return record, code


def find_active_otp(db: Session, identifier: str, channel: OTPType) -> Optional[OTPRecord]:
    """The newest unconsumed, unexpired record that still has attempts left."""
    return db.query(OTPRecord).filter(
        OTPRecord.identifier == identifier,
        OTPRecord.type == channel,
        OTPRecord.consumed == False,
        OTPRecord.expires_at > otp_utils.utcnow(),
        OTPRecord.attempts < settings.OTP_MAX_ATTEMPTS,
    ).order_by(OTPRecord.created_at.desc(), OTPRecord.id.desc()).first()


def _parse_signup_role(role: Optional[str]) -> Role:
    if not role:
        raise ValidationError("Role is required for new users")
    try:
        parsed = Role(role.upper())
    except ValueError:
        raise ValidationError(f"Invalid role: {role}")
    if parsed not in SELF_SERVICE_ROLES:
        raise ValidationError(f"Role {parsed.value} cannot be chosen at sign-up")
    return parsed


def verify_otp(
    db: Session,
    identifier: Optional[str],
    channel: OTPType,
    code: Optional[str],
    role: Optional[str] = None,
    allow_signup: bool = False,
) -> VerificationResult:
    """
    Check a code against the newest active OTP for the identifier.

    On success the record is consumed and the channel is marked verified on
    the user in a single commit. With ``allow_signup`` (phone only) a missing
    account is created with ``role``. Session creation is left to the caller.
    """
    if not identifier or not code:
        raise ValidationError(f"{_field_name(channel)} and code are required")

    # Without sign-up the account must exist before any attempt is spent
    user = find_user(db, identifier, channel)
    if not user and (channel != OTPType.PHONE or not allow_signup):
        raise NotFoundError("User not found")

    record = find_active_otp(db, identifier, channel)
    if not record:
        raise InvalidOrExpiredError()

    if not otp_utils.verify_otp_hash(code, record.code_hash):
        db.execute(
            update(OTPRecord)
            .where(OTPRecord.id == record.id)
            .values(attempts=OTPRecord.attempts + 1)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        logger.info(f"Wrong code for OTP #{record.id} (limit {settings.OTP_MAX_ATTEMPTS})")
        raise InvalidCodeError()

    created = False
    if not user:
        user = User(phone=identifier, role=_parse_signup_role(role), phone_verified=True)
        db.add(user)
        created = True

    try:
        # Guarded update: only one request can flip consumed for this record
        result = db.execute(
            update(OTPRecord)
            .where(OTPRecord.id == record.id, OTPRecord.consumed == False)
            .values(consumed=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidOrExpiredError()

        if channel == OTPType.EMAIL:
            user.email_verified = True
        else:
            user.phone_verified = True
        db.flush()

        if record.user_id is None:
            db.execute(
                update(OTPRecord)
                .where(OTPRecord.id == record.id)
                .values(user_id=user.id)
                .execution_options(synchronize_session=False)
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(user)
    if created:
        logger.info(f"Created {user.role.value} account #{user.id} for {identifier}")
        return VerifiedAndCreated(user=user)

    logger.info(f"Verified {channel.value} {identifier} for user #{user.id}")
    return Verified(user=user)
