import pytest
from core.exceptions import AlreadyVerified, DeliveryError, InvalidToken
from models.users import User
from services.verification_service import VerificationService
from utils.hashing import hash_secret


async def test_resend_then_redeem(session, settings, make_user, outbox):
    user = make_user(email_verified=False)

    await VerificationService.resend_email_verification(user.email, session, settings)
    token = outbox[-1][2]

    session.refresh(user)
    assert user.email_verification_token_hash == hash_secret(token, settings.SECRET_KEY)

    VerificationService.redeem_email_token(token, session, settings)

    assert session.get(User, user.id).email_verified is True


def test_redeem_unknown_token_leaves_users_untouched(session, settings, make_user):
    user = make_user(email_verified=False)

    with pytest.raises(InvalidToken):
        VerificationService.redeem_email_token("unknown-token", session, settings)

    assert session.get(User, user.id).email_verified is False


async def test_phone_code_redeem(session, settings, make_user, outbox):
    user = make_user(phone_verified=False)

    await VerificationService.send_phone_code(user, session, settings)
    VerificationService.redeem_phone_code(user, outbox[-1][2], session, settings)

    assert session.get(User, user.id).phone_verified is True

    with pytest.raises(AlreadyVerified):
        await VerificationService.send_phone_code(session.get(User, user.id), session, settings)


async def test_email_delivery_failure_propagates(session, settings, make_user, monkeypatch):
    """A failed send is reported to the caller, never swallowed."""
    user = make_user(email_verified=False)

    async def broken_email(settings, to_email, token):
        raise DeliveryError("SMTP unavailable")

    monkeypatch.setattr("services.verification_service.send_verification_email", broken_email)

    with pytest.raises(DeliveryError):
        await VerificationService.resend_email_verification(user.email, session, settings)


async def test_sms_delivery_failure_propagates(session, settings, make_user, monkeypatch):
    user = make_user(phone_verified=False)

    async def broken_sms(settings, to_number, code):
        raise DeliveryError("Twilio unavailable")

    monkeypatch.setattr("services.verification_service.send_verification_sms", broken_sms)

    with pytest.raises(DeliveryError):
        await VerificationService.send_phone_code(user, session, settings)
