import base64
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from parity.core.config import Settings
from parity.core.exceptions import ConfigurationError, InvalidTokenError, TokenExpiredError
from parity.core.tokens import (
    TokenSettings,
    create_access_token,
    create_refresh_token,
    verify_access_token,
    verify_refresh_token,
)


FIXED_NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_access_and_refresh_tokens_differ(token_settings):
    payload = {"sub": "user-123"}
    assert create_access_token(payload, token_settings) != create_refresh_token(payload, token_settings)


def test_access_token_rejected_by_refresh_verifier(token_settings):
    token = create_access_token({"sub": "user-123"}, token_settings)
    with pytest.raises(InvalidTokenError):
        verify_refresh_token(token, token_settings)


def test_refresh_token_rejected_by_access_verifier(token_settings):
    token = create_refresh_token({"sub": "user-123"}, token_settings)
    with pytest.raises(InvalidTokenError):
        verify_access_token(token, token_settings)


def test_signing_is_deterministic_for_a_fixed_clock(token_settings):
    payload = {"sub": "user-123", "email": "a@test.com"}
    first = create_access_token(payload, token_settings, now=FIXED_NOW)
    second = create_access_token(payload, token_settings, now=FIXED_NOW)
    assert first == second


def test_expiry_is_issue_time_plus_lifetime(token_settings):
    token = create_access_token({"sub": "user-123"}, token_settings, now=FIXED_NOW)
    claims = jwt.get_unverified_claims(token)
    assert claims["iat"] == int(FIXED_NOW.timestamp())
    assert claims["exp"] - claims["iat"] == 900
    assert claims["type"] == "access"

    refresh_claims = jwt.get_unverified_claims(create_refresh_token({"sub": "user-123"}, token_settings, now=FIXED_NOW))
    assert refresh_claims["exp"] - refresh_claims["iat"] == 3600
    assert refresh_claims["type"] == "refresh"


def test_fresh_token_expires_within_a_second_of_lifetime(token_settings):
    before = datetime.now(timezone.utc).timestamp()
    claims = verify_access_token(create_access_token({"sub": "user-123"}, token_settings), token_settings)
    assert abs(claims.exp - (before + 900)) <= 1


def test_token_does_not_validate_after_expiry(token_settings):
    issued = datetime.now(timezone.utc) - timedelta(seconds=901)
    token = create_access_token({"sub": "user-123"}, token_settings, now=issued)
    with pytest.raises(TokenExpiredError):
        verify_access_token(token, token_settings)


def test_expired_token_with_foreign_signature_is_invalid_not_expired(token_settings):
    issued = datetime.now(timezone.utc) - timedelta(seconds=901)
    forged = jwt.encode(
        {"sub": "user-123", "iat": int(issued.timestamp()), "exp": int(issued.timestamp()) + 900, "type": "access"},
        "some-other-secret",
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        verify_access_token(forged, token_settings)


def test_verify_returns_caller_claims(token_settings):
    token = create_access_token({"sub": "user-123", "email": "a@test.com"}, token_settings)
    payload = verify_access_token(token, token_settings)
    assert payload.sub == "user-123"
    assert payload.type == "access"
    assert payload.model_extra["email"] == "a@test.com"


def test_payload_cannot_choose_its_token_class(token_settings):
    token = create_access_token({"sub": "user-123", "type": "refresh", "exp": 1}, token_settings, now=FIXED_NOW)
    claims = jwt.get_unverified_claims(token)
    assert claims["type"] == "access"
    assert claims["exp"] == int(FIXED_NOW.timestamp()) + 900


def test_string_and_bytes_payloads_become_subject(token_settings):
    assert verify_access_token(create_access_token("user-123", token_settings), token_settings).sub == "user-123"
    assert verify_refresh_token(create_refresh_token(b"user-456", token_settings), token_settings).sub == "user-456"


def test_garbage_token_is_invalid(token_settings):
    with pytest.raises(InvalidTokenError):
        verify_access_token("not-a-token", token_settings)


def test_missing_access_secret_raises_configuration_error():
    settings = TokenSettings(access_secret=None, refresh_secret="refresh-secret")
    with pytest.raises(ConfigurationError) as exc_info:
        create_access_token({"sub": "user-123"}, settings)
    assert "JWT_ACCESS_TOKEN_SECRET" in exc_info.value.detail
    assert exc_info.value.status_code == 500
    # The refresh class is unaffected
    assert create_refresh_token({"sub": "user-123"}, settings)


def test_shared_secret_is_a_configuration_error():
    settings = TokenSettings(access_secret="same", refresh_secret="same")
    with pytest.raises(ConfigurationError):
        create_access_token({"sub": "user-123"}, settings)
    with pytest.raises(ConfigurationError):
        settings.validate()


def test_from_settings_fails_fast_on_missing_secret(monkeypatch):
    monkeypatch.delenv("JWT_REFRESH_TOKEN_SECRET", raising=False)
    settings = Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite:///:memory:", JWT_ACCESS_TOKEN_SECRET="a")
    with pytest.raises(ConfigurationError) as exc_info:
        TokenSettings.from_settings(settings)
    assert "JWT_REFRESH_TOKEN_SECRET" in exc_info.value.detail


def test_from_settings_copies_expiry_policy():
    settings = Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        JWT_ACCESS_TOKEN_SECRET="a",
        JWT_REFRESH_TOKEN_SECRET="b",
        ACCESS_TOKEN_EXPIRY_SECONDS=60,
        REFRESH_TOKEN_EXPIRY_SECONDS=120,
    )
    token_settings = TokenSettings.from_settings(settings)
    assert token_settings.access_lifetime == 60
    assert token_settings.refresh_lifetime == 120
    assert "access_secret" not in repr(token_settings)


def test_non_utf8_bytes_payload_is_carried_as_base64url(token_settings):
    raw = b"\xff\xfe\x00binary"
    payload = verify_access_token(create_access_token(raw, token_settings), token_settings)
    assert payload.model_extra["sub_encoding"] == "base64url"
    padded = payload.sub + "=" * (-len(payload.sub) % 4)
    assert base64.urlsafe_b64decode(padded) == raw


def test_non_string_subject_round_trips(token_settings):
    token = create_access_token({"sub": 123}, token_settings)
    assert verify_access_token(token, token_settings).sub == 123


def test_audience_claim_round_trips(token_settings):
    token = create_refresh_token({"sub": "user-123", "aud": "banner-widget"}, token_settings)
    payload = verify_refresh_token(token, token_settings)
    assert payload.model_extra["aud"] == "banner-widget"
