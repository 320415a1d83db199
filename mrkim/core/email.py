import logging

import aiohttp

from .config import settings

logger = logging.getLogger(__name__)

BREVO_SEND_URL = "https://api.brevo.com/v3/smtp/email"


def _render_html(otp_code: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #374151; background: #f5f5f5; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background: lightgreen; color: green; padding: 30px; text-align: center; border-radius: 16px 16px 0 0; }}
            .content {{ background: #ffffff; padding: 30px; border-radius: 0 0 16px 16px; border: 3px solid #15803d; }}
            .otp-box {{ background: #f0fdf4; border: 2px dashed #15803d; padding: 20px; text-align: center; margin: 20px 0; border-radius: 12px; }}
            .otp-code {{ font-size: 42px; font-weight: 800; color: #15803d; letter-spacing: 8px; font-family: 'Courier New', monospace; }}
            .footer {{ text-align: center; color: #6b7280; font-size: 12px; margin-top: 20px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>Email Verification</h1>
            </div>
            <div class="content">
                <p>Hello,</p>
                <p>Thank you for choosing {settings.EMAIL_FROM_NAME}! To complete your registration, please use the verification code below:</p>

                <div class="otp-box">
                    <div class="otp-code">{otp_code}</div>
                </div>

                <p><strong>This code will expire in {settings.OTP_EXPIRE_MINUTES} minutes.</strong></p>

                <p>If you did not request this code, you can safely ignore this email.</p>

                <div class="footer">
                    <p>---</p>
                    <p>{settings.EMAIL_FROM_NAME}</p>
                </div>
            </div>
        </div>
    </body>
    </html>
    """


def _render_text(otp_code: str) -> str:
    return f"""
Email Verification

Your verification code is: {otp_code}

This code will expire in {settings.OTP_EXPIRE_MINUTES} minutes.

If you did not request this code, you can safely ignore this email.

---
{settings.EMAIL_FROM_NAME}
    """


async def send_otp_email(to_email: str, otp_code: str):
    """Send a verification code via the Brevo API."""
    if not settings.BREVO_API_KEY:
        logger.warning("[DEV MODE] OTP for %s: %s", to_email, otp_code)
        return

    headers = {
        "api-key": settings.BREVO_API_KEY,
        "Content-Type": "application/json"
    }

    payload = {
        "sender": {
            "name": settings.EMAIL_FROM_NAME,
            "email": settings.EMAIL_FROM_ADDRESS
        },
        "to": [{"email": to_email}],
        "subject": f"Your Verification Code - {settings.EMAIL_FROM_NAME}",
        "htmlContent": _render_html(otp_code),
        "textContent": _render_text(otp_code)
    }

    async with aiohttp.ClientSession() as session:
        async with session.post(BREVO_SEND_URL, json=payload, headers=headers) as response:
            result = await response.json()

            if response.status != 201:
                raise RuntimeError(f"Brevo API error ({response.status}): {result}")

            logger.info("OTP email sent to %s, message_id=%s", to_email, result.get("messageId", "unknown"))
