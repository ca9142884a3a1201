from typing import Any

from pydantic import BaseModel, ConfigDict

class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str


class TokenPayload(BaseModel):
    sub: Any = None
    iat: int
    exp: int
    type: str

    # Caller-supplied claims (e.g. email) are carried through untouched.
    model_config = ConfigDict(extra="allow")

class TokenRefreshRequest(BaseModel):
    refresh_token: str | None = None

class TokenRevokeRequest(BaseModel):
    refresh_token: str | None = None
