# Notification sender - delivers plaintext OTP codes by email or SMS

import logging

from ..core.email import send_otp_email
from ..core.sms import send_otp_sms
from ..models.otp import OTPType

logger = logging.getLogger(__name__)


class CodeSender:
    """
    Best-effort delivery of a verification code.
    Failures are logged and never raised: the OTP record is already stored
    and the user can simply request a new code.
    """

    async def send(self, channel: OTPType, identifier: str, code: str) -> None:
        try:
            if channel == OTPType.EMAIL:
                await send_otp_email(identifier, code)
            else:
                await send_otp_sms(identifier, code)
        except Exception as e:
            logger.error(f"Failed to deliver {channel.value} OTP to {identifier}: {e}")


# Singleton instance
_code_sender = None

def get_code_sender() -> CodeSender:
    """Get singleton code sender instance"""
    global _code_sender
    if _code_sender is None:
        _code_sender = CodeSender()
    return _code_sender
