from typing import Optional
from pydantic import BaseModel, EmailStr

# Fields are optional so missing input is reported with a specific message
# instead of a generic 422. Malformed emails are still rejected by EmailStr.

class RegisterRequest(BaseModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None

class LoginRequest(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None

class EmailOTPRequest(BaseModel):
    email: Optional[EmailStr] = None

class EmailVerifyRequest(BaseModel):
    email: Optional[EmailStr] = None
    code: Optional[str] = None

class PhoneOTPRequest(BaseModel):
    phone: Optional[str] = None

class PhoneVerifyRequest(BaseModel):
    phone: Optional[str] = None
    code: Optional[str] = None

class PhoneLoginVerifyRequest(PhoneVerifyRequest):
    role: Optional[str] = None

class MessageResponse(BaseModel):
    message: str

class UserSummary(BaseModel):
    id: int
    username: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: str

class UserResponse(MessageResponse):
    user: UserSummary

class LoginResponse(UserResponse):
    access_token: str
    token_type: str = "bearer"

class PhoneLoginResponse(UserResponse):
    isNewUser: bool

class SessionResponse(BaseModel):
    user: Optional[UserSummary] = None
    isLoggedIn: bool
