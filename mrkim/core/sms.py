import logging

import aiohttp

from .config import settings

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


async def send_otp_sms(phone: str, otp_code: str):
    """Send a verification code by SMS through the Twilio REST API."""
    if not (settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_SENDER_ID):
        logger.warning("[DEV MODE] OTP for %s: %s", phone, otp_code)
        return

    data = {
        "To": phone,
        "From": settings.TWILIO_SENDER_ID,
        "Body": f"Your verification code is: {otp_code}. It will expire in {settings.OTP_EXPIRE_MINUTES} minutes.",
    }
    auth = aiohttp.BasicAuth(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)

    async with aiohttp.ClientSession(auth=auth) as session:
        async with session.post(TWILIO_MESSAGES_URL.format(sid=settings.TWILIO_ACCOUNT_SID), data=data) as response:
            result = await response.json()

            if response.status >= 300:
                raise RuntimeError(f"Twilio API error ({response.status}): {result.get('message', result)}")

            logger.info("OTP SMS sent to %s, sid=%s", phone, result.get("sid", "unknown"))
