import logging
from typing import Optional
from fastapi import APIRouter, Depends, Response
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from ..core.database import get_db
from ..core.errors import ConflictError, ForbiddenError, InvalidCredentialsError, ValidationError
from ..core.security import (
    SessionData,
    clear_session,
    establish_session,
    get_current_session,
    get_password_hash,
    verify_password,
)
from ..models.otp import OTPType
from ..models.user import Role, User
from ..schemas.auth import (
    EmailOTPRequest,
    EmailVerifyRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PhoneLoginResponse,
    PhoneLoginVerifyRequest,
    PhoneOTPRequest,
    PhoneVerifyRequest,
    RegisterRequest,
    SessionResponse,
    UserResponse,
    UserSummary,
)
from ..services import otp_service
from ..services.notifier import CodeSender, get_code_sender

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _summary(user: User) -> UserSummary:
    return UserSummary(id=user.id, username=user.username, email=user.email, phone=user.phone, role=user.role.value)


def _parse_role(role: str) -> Role:
    try:
        return Role(role.upper())
    except ValueError:
        raise ValidationError(f"Invalid role: {role}")


@router.post("/register", response_model=UserResponse, status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account with email or phone and a password. The channel still needs verifying."""
    if (not payload.email and not payload.phone) or not payload.password or not payload.role:
        raise ValidationError("Email or phone, password, and role are required")

    role = _parse_role(payload.role)
    if role == Role.ADMIN:
        raise ValidationError("Role ADMIN cannot be chosen at sign-up")

    taken = []
    if payload.email:
        taken.append(User.email == payload.email)
    if payload.phone:
        taken.append(User.phone == payload.phone)
    if db.query(User).filter(or_(*taken)).first():
        raise ConflictError("User already exists")

    user = User(
        email=payload.email or None,
        phone=payload.phone or None,
        password_hash=get_password_hash(payload.password),
        role=role,
        email_verified=False,
        phone_verified=False,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email or phone
        db.rollback()
        raise ConflictError("User already exists")
    db.refresh(user)
    logger.info(f"Registered {role.value} account #{user.id}")

    return UserResponse(
        message=f"User created successfully. Please verify your {'email' if payload.email else 'phone'}.",
        user=_summary(user),
    )


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):
    if not payload.email or not payload.password:
        raise ValidationError("Email and password are required")

    user = db.query(User).filter(User.email == payload.email).first()
    if not user or not user.password_hash:
        raise InvalidCredentialsError()
    if not user.email_verified:
        raise ForbiddenError("Email not verified. Please verify your email first.")
    if not verify_password(payload.password, user.password_hash):
        raise InvalidCredentialsError()

    token = establish_session(response, user.id, user.email, user.role.value)
    return LoginResponse(message="Login successful", user=_summary(user), access_token=token)


@router.post("/email/request", response_model=MessageResponse)
async def request_email_otp(
    payload: EmailOTPRequest,
    db: Session = Depends(get_db),
    sender: CodeSender = Depends(get_code_sender),
):
    """Send a verification code to the email of an existing, unverified account."""
    user = otp_service.require_unverified_user(db, payload.email, OTPType.EMAIL)
    _, code = otp_service.issue_otp(db, payload.email, OTPType.EMAIL, user_id=user.id)
    await sender.send(OTPType.EMAIL, payload.email, code)
    return MessageResponse(message="OTP sent to your email")


@router.post("/email/verify", response_model=MessageResponse)
def verify_email_otp(payload: EmailVerifyRequest, db: Session = Depends(get_db)):
    otp_service.verify_otp(db, payload.email, OTPType.EMAIL, payload.code)
    return MessageResponse(message="Email verified successfully")


@router.post("/phone/request", response_model=MessageResponse)
async def request_phone_otp(
    payload: PhoneOTPRequest,
    db: Session = Depends(get_db),
    sender: CodeSender = Depends(get_code_sender),
):
    """Send a verification code to the phone of an existing, unverified account."""
    user = otp_service.require_unverified_user(db, payload.phone, OTPType.PHONE)
    _, code = otp_service.issue_otp(db, payload.phone, OTPType.PHONE, user_id=user.id)
    await sender.send(OTPType.PHONE, payload.phone, code)
    return MessageResponse(message="OTP sent to your phone")


@router.post("/phone/verify", response_model=UserResponse)
def verify_phone_otp(payload: PhoneVerifyRequest, db: Session = Depends(get_db)):
    result = otp_service.verify_otp(db, payload.phone, OTPType.PHONE, payload.code)
    return UserResponse(message="Phone verified successfully", user=_summary(result.user))


@router.post("/otp/request", response_model=MessageResponse)
async def request_login_otp(
    payload: PhoneOTPRequest,
    db: Session = Depends(get_db),
    sender: CodeSender = Depends(get_code_sender),
):
    """Phone-first sign-in. The account may not exist yet."""
    user = otp_service.find_user(db, payload.phone, OTPType.PHONE) if payload.phone else None
    _, code = otp_service.issue_otp(db, payload.phone, OTPType.PHONE, user_id=user.id if user else None)
    await sender.send(OTPType.PHONE, payload.phone, code)
    return MessageResponse(message="OTP sent to your phone")


@router.post("/otp/verify", response_model=PhoneLoginResponse)
def verify_login_otp(payload: PhoneLoginVerifyRequest, response: Response, db: Session = Depends(get_db)):
    """Verify a phone-first code, creating the account when needed, then log in."""
    result = otp_service.verify_otp(
        db, payload.phone, OTPType.PHONE, payload.code, role=payload.role, allow_signup=True
    )
    user = result.user
    establish_session(response, user.id, user.phone, user.role.value)

    if isinstance(result, otp_service.VerifiedAndCreated):
        response.status_code = 201
        message = "Account created and phone verified successfully"
    else:
        message = "Phone verified successfully"

    return PhoneLoginResponse(
        message=message,
        isNewUser=isinstance(result, otp_service.VerifiedAndCreated),
        user=_summary(user),
    )


@router.get("/session", response_model=SessionResponse)
def get_session(
    session: Optional[SessionData] = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    if session is None:
        return SessionResponse(user=None, isLoggedIn=False)

    user = db.query(User).filter(User.id == session.user_id).first()
    if not user:
        return SessionResponse(user=None, isLoggedIn=False)
    return SessionResponse(user=_summary(user), isLoggedIn=True)


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    clear_session(response)
    return MessageResponse(message="Logged out")
