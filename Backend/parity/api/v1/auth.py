from typing import Annotated
from fastapi import APIRouter, Cookie, Depends, Response
from fastapi.security import OAuth2PasswordRequestForm
from slowapi import Limiter
from parity.core.config import get_settings
from parity.core.exceptions import UnauthorizedException
from parity.services.auth_service import AuthService
from parity.services.email_verification_service import EmailVerificationService
from parity.services.user_service import UserService
from parity.api.deps import get_auth_service, get_email_verification_service, get_user_service
from parity.schemas.token import TokenResponse, TokenRefreshRequest, TokenRevokeRequest
from parity.schemas.email_verification import EmailVerificationRequest, EmailVerificationConfirm, MessageResponse
from parity.schemas.user import RegisterUserRequest, UserResponse
from slowapi.util import get_remote_address
from starlette.requests import Request
from fastapi import status

router = APIRouter()

auth_service = Annotated[AuthService, Depends(get_auth_service)]
user_service = Annotated[UserService, Depends(get_user_service)]
verification_service = Annotated[EmailVerificationService, Depends(get_email_verification_service)]
refresh_cookie = Annotated[str | None, Cookie(alias="refresh_token")]

REFRESH_COOKIE_NAME = "refresh_token"
VERIFICATION_SENT_MESSAGE = "If the email exists and is unverified, a verification link has been sent."


limiter = Limiter(key_func=get_remote_address)


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def _set_refresh_cookie(response: Response, tokens: TokenResponse) -> None:
    settings = get_settings()
    response.set_cookie(
        REFRESH_COOKIE_NAME,
        tokens.refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRY_SECONDS,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
async def register(
    request: Request,
    user_in: RegisterUserRequest,
    service: user_service,
    verification: verification_service,
) -> UserResponse:
    user = await service.create_user(user_in)
    await verification.request_verification(
        user.email,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return user


@router.post("/sign-in", response_model=TokenResponse)
@limiter.limit("5/minute")  
async def sign_in(
    request: Request,
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    service: auth_service,
) -> TokenResponse:
    tokens = await service.login(
        form_data.username,
        form_data.password,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    _set_refresh_cookie(response, tokens)
    return tokens

@router.post('/refresh', response_model=TokenResponse)
@limiter.limit("10/minute")
async def refresh_token(
    request: Request,
    response: Response,
    service: auth_service,
    cookie_token: refresh_cookie = None,
    request_body: TokenRefreshRequest | None = None,
) -> TokenResponse:
    token = (request_body.refresh_token if request_body else None) or cookie_token
    if not token:
        raise UnauthorizedException(detail="Refresh token missing")
    tokens = await service.refresh_access_token(
        token,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    _set_refresh_cookie(response, tokens)
    return tokens


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("10/minute")
async def logout(
    request: Request,
    response: Response,
    service: auth_service,
    cookie_token: refresh_cookie = None,
    body: TokenRevokeRequest | None = None,
):
    token = (body.refresh_token if body else None) or cookie_token
    if not token:
        raise UnauthorizedException(detail="Refresh token missing")
    await service.logout(token)
    response.delete_cookie(REFRESH_COOKIE_NAME)


@router.post("/email/request", response_model=MessageResponse)
@limiter.limit("3/minute")
async def request_email_verification(
    request: Request,
    body: EmailVerificationRequest,
    service: verification_service,
) -> MessageResponse:
    await service.request_verification(
        body.email,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    # Same answer for every address to prevent email enumeration
    return MessageResponse(message=VERIFICATION_SENT_MESSAGE)


@router.post("/email/verify", response_model=MessageResponse)
@limiter.limit("5/minute")
async def verify_email(
    request: Request,
    body: EmailVerificationConfirm,
    service: verification_service,
) -> MessageResponse:
    await service.verify(body.token)
    return MessageResponse(message="Email has been verified successfully.")
