from datetime import datetime, timedelta, timezone
from utils.verification import (generate_verification_code, generate_verification_token,
    get_code_expiry_time, is_expired)


def test_generate_verification_code():
    code = generate_verification_code()
    assert len(code) == 6
    assert code.isdigit()


def test_verification_codes_vary():
    codes = {generate_verification_code() for _ in range(50)}
    assert len(codes) > 1


def test_generate_verification_token():
    token = generate_verification_token()
    assert len(token) >= 43
    assert token != generate_verification_token()


def test_get_code_expiry_time():
    expiry = get_code_expiry_time(10)
    now = datetime.now(timezone.utc)

    assert expiry.tzinfo is not None
    assert timedelta(minutes=9) < expiry - now <= timedelta(minutes=10)


def test_is_expired():
    now = datetime.now(timezone.utc)

    assert is_expired(None) is True
    assert is_expired(now - timedelta(seconds=1)) is True
    assert is_expired(now + timedelta(minutes=5)) is False


def test_is_expired_treats_naive_as_utc():
    naive_future = (datetime.now(timezone.utc) + timedelta(minutes=5)).replace(tzinfo=None)
    naive_past = (datetime.now(timezone.utc) - timedelta(minutes=5)).replace(tzinfo=None)

    assert is_expired(naive_future) is False
    assert is_expired(naive_past) is True
