import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from starlette.concurrency import run_in_threadpool
from core.config import Settings
from core.exceptions import DeliveryError
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


def _deliver(settings: Settings, to_email: str, message: MIMEMultipart):
    with smtplib.SMTP(settings.MAIL_SERVER, settings.MAIL_PORT, timeout=30) as server:
        server.starttls()
        server.login(settings.MAIL_USERNAME, settings.MAIL_PASSWORD)
        server.sendmail(settings.MAIL_FROM, to_email, message.as_string())


async def send_email(settings: Settings, to_email: str, subject: str, body: str):
    """
    Send an HTML email and wait for the SMTP server to accept it.

    Raises:
        DeliveryError: the SMTP conversation failed
    """
    if settings.is_testing:
        logger.info(
            "[TEST MODE] Email skipped",
            extra={"recipient": to_email, "subject": subject}
        )
        return

    logger.debug(
        "Attempting to send email",
        extra={"recipient": to_email, "subject": subject}
    )

    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = f"Sell-It <{settings.MAIL_FROM}>"
    message["To"] = to_email
    message.attach(MIMEText(body, "html"))

    try:
        # smtplib blocks; keep it off the event loop
        await run_in_threadpool(_deliver, settings, to_email, message)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(
            f"Failed to send email: {str(e)}",
            extra={
                "recipient": to_email,
                "subject": subject,
                "error_type": type(e).__name__
            },
            exc_info=True
        )
        raise DeliveryError(f"Could not send email to {to_email}") from e

    logger.info(
        "Email sent successfully",
        extra={"recipient": to_email, "subject": subject}
    )


async def send_verification_email(settings: Settings, to_email: str, token: str):
    verification_url = f"{settings.CLIENT_URL.rstrip('/')}/verify-email?token={token}"

    subject = "Verify Your Email - Sell-It"
    email_body = f"""
    <html>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
        <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
            <h2 style="color: #2c3e50; text-align: center;">Welcome to Sell-It!</h2>
            <p>Please verify your email address by clicking the button below:</p>
            <div style="text-align: center; margin: 30px 0;">
                <a href="{verification_url}"
                style="display: inline-block; padding: 12px 30px; background-color: #4CAF50;
                        color: white; text-decoration: none; border-radius: 5px;">
                    Verify Email
                </a>
            </div>
            <p style="color: #666; font-size: 14px;">
                This link expires in {settings.EMAIL_TOKEN_EXPIRE_HOURS} hours.
            </p>
            <p style="color: #999; font-size: 12px;">
                If you didn't create an account, you can safely ignore this email.
                <br><br>
                {verification_url}
            </p>
        </div>
    </body>
    </html>
    """

    await send_email(settings, to_email=to_email, subject=subject, body=email_body)
