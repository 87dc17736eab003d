from main import loggable_path
from utils.logger import sanitize_log_data


def test_password_redaction():
    data = {"email": "user@example.com", "current_password": "supersecret123"}
    sanitized = sanitize_log_data(data)

    assert sanitized["email"] == "user@example.com"
    assert sanitized["current_password"] == "***REDACTED***"


def test_verification_token_keeps_prefix_only():
    token = "Qm9ndXNUb2tlblZhbHVlRm9yVGVzdGluZ1B1cnBvc2Vz"
    sanitized = sanitize_log_data({"token": token})

    assert sanitized["token"] == f"{token[:8]}..."
    assert token[8:] not in sanitized["token"]


def test_short_token_fully_redacted():
    assert sanitize_log_data({"token": "abc"})["token"] == "***REDACTED***"


def test_verification_code_redaction():
    data = {"code": "123456", "search": "bike", "page": "2"}
    sanitized = sanitize_log_data(data)

    assert sanitized["code"] == "***REDACTED***"
    assert sanitized["search"] == "bike"
    assert sanitized["page"] == "2"


def test_nested_dict_sanitization():
    data = {"twilio": {"account": "AC123", "auth_token": "tok_abcdefghijkl"}}
    sanitized = sanitize_log_data(data)

    assert sanitized["twilio"]["account"] == "AC123"
    assert sanitized["twilio"]["auth_token"] == "tok_abcd..."


def test_input_not_mutated():
    data = {"password": "supersecret123"}
    sanitize_log_data(data)

    assert data["password"] == "supersecret123"


def test_verify_email_path_is_masked():
    path = loggable_path("/auth/verify-email/Qm9ndXNUb2tlblZhbHVl")

    assert path == "/auth/verify-email/Qm9ndXNU..."
    assert loggable_path("/products/categories") == "/products/categories"
