import httpx
from core.config import Settings
from core.exceptions import DeliveryError
from utils.logger import get_logger

logger = get_logger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


async def send_sms(settings: Settings, to_number: str, body: str):
    """
    Send a text message through the Twilio REST API.

    testing: no-op. development: the message is logged instead of sent.

    Raises:
        DeliveryError: provider not configured or the request failed
    """
    if settings.is_testing:
        return

    if settings.ENV == "development":
        logger.info(f"[SMS] {to_number}: {body}")
        return

    if not (settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_PHONE_NUMBER):
        logger.error("Twilio credentials are not configured")
        raise DeliveryError("SMS service is not configured")

    url = TWILIO_MESSAGES_URL.format(sid=settings.TWILIO_ACCOUNT_SID)

    try:
        async with httpx.AsyncClient(timeout=15.0) as client:
            response = await client.post(
                url,
                auth=(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN),
                data={"To": to_number, "From": settings.TWILIO_PHONE_NUMBER, "Body": body}
            )
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(
            f"Failed to send SMS: {str(e)}",
            extra={"recipient": to_number, "error_type": type(e).__name__},
            exc_info=True
        )
        raise DeliveryError(f"Could not send SMS to {to_number}") from e

    logger.info("Verification SMS sent", extra={"recipient": to_number})


async def send_verification_sms(settings: Settings, to_number: str, code: str):
    body = (
        f"Your Sell-It verification code is: {code}. "
        f"It expires in {settings.PHONE_CODE_EXPIRE_MINUTES} minutes."
    )
    await send_sms(settings, to_number, body)
