"""
Access and refresh token signing.

Each token class has its own secret and lifetime. The class of a token is
decided by which function is called and is written into the ``type`` claim by
the signer, so a caller's payload can never choose it.
"""
import base64
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Union

from jose import ExpiredSignatureError, JWTError, jwt

from parity.core.config import Settings
from parity.core.exceptions import ConfigurationError, InvalidTokenError, TokenExpiredError
from parity.models.enums import TokenType
from parity.schemas.token import TokenPayload

Payload = Union[str, bytes, Mapping[str, Any]]

# The payload is opaque here: registered claims the caller supplies (sub,
# aud, jti) are carried, not policed. Only signature, exp and nbf are checked.
DECODE_OPTIONS = {"verify_aud": False, "verify_sub": False, "verify_jti": False}

SECRET_ENV_NAMES = {
    TokenType.ACCESS: "JWT_ACCESS_TOKEN_SECRET",
    TokenType.REFRESH: "JWT_REFRESH_TOKEN_SECRET",
}


@dataclass(frozen=True)
class TokenSettings:
    access_secret: str | None = field(repr=False)
    refresh_secret: str | None = field(repr=False)
    algorithm: str = "HS256"
    access_lifetime: int = 900
    refresh_lifetime: int = 7 * 24 * 60 * 60

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenSettings":
        """Build and validate the token settings. Raises ConfigurationError."""
        token_settings = cls(
            access_secret=settings.JWT_ACCESS_TOKEN_SECRET,
            refresh_secret=settings.JWT_REFRESH_TOKEN_SECRET,
            algorithm=settings.ALGORITHM,
            access_lifetime=settings.ACCESS_TOKEN_EXPIRY_SECONDS,
            refresh_lifetime=settings.REFRESH_TOKEN_EXPIRY_SECONDS,
        )
        token_settings.validate()
        return token_settings

    def validate(self) -> None:
        for token_type in TokenType:
            self.secret_for(token_type)

    def secret_for(self, token_type: TokenType) -> str:
        secret = self.access_secret if token_type is TokenType.ACCESS else self.refresh_secret
        if not secret:
            raise ConfigurationError(detail=f"{SECRET_ENV_NAMES[token_type]} environment variable not found.")
        if self.access_secret == self.refresh_secret:
            raise ConfigurationError(detail="Access and refresh tokens must be signed with different secrets.")
        return secret

    def lifetime_for(self, token_type: TokenType) -> int:
        return self.access_lifetime if token_type is TokenType.ACCESS else self.refresh_lifetime


def _to_claims(payload: Payload) -> dict[str, Any]:
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            # Carried losslessly; sub_encoding tells the reader how to get the bytes back
            encoded = base64.urlsafe_b64encode(payload).rstrip(b"=").decode("ascii")
            return {"sub": encoded, "sub_encoding": "base64url"}
    if isinstance(payload, str):
        return {"sub": payload}
    return dict(payload)


def _create_token(payload: Payload, settings: TokenSettings, token_type: TokenType, now: datetime | None) -> str:
    secret = settings.secret_for(token_type)
    issued_at = int((now or datetime.now(timezone.utc)).timestamp())
    to_encode = _to_claims(payload)
    to_encode.update(
        iat=issued_at,
        exp=issued_at + settings.lifetime_for(token_type),
        type=token_type.value,
    )
    return jwt.encode(to_encode, secret, algorithm=settings.algorithm)


def _verify_token(token: str, settings: TokenSettings, token_type: TokenType) -> TokenPayload:
    secret = settings.secret_for(token_type)
    try:
        # The signature is checked before the expiry, so a forged token is
        # reported as invalid even when its exp has also passed.
        claims = jwt.decode(token, secret, algorithms=[settings.algorithm], options=DECODE_OPTIONS)
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise InvalidTokenError()
    if claims.get("type") != token_type.value:
        raise InvalidTokenError(detail="Invalid token type.")
    return TokenPayload(**claims)


def create_access_token(payload: Payload, settings: TokenSettings, now: datetime | None = None) -> str:
    return _create_token(payload, settings, TokenType.ACCESS, now)

def create_refresh_token(payload: Payload, settings: TokenSettings, now: datetime | None = None) -> str:
    return _create_token(payload, settings, TokenType.REFRESH, now)

def verify_access_token(token: str, settings: TokenSettings) -> TokenPayload:
    return _verify_token(token, settings, TokenType.ACCESS)

def verify_refresh_token(token: str, settings: TokenSettings) -> TokenPayload:
    return _verify_token(token, settings, TokenType.REFRESH)
