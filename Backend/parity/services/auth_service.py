from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4
from parity.core.exceptions import InvalidTokenError, UnauthorizedException
from parity.core.security import hash_token, verify_password
from parity.core.tokens import TokenSettings, create_access_token, create_refresh_token, verify_refresh_token
from parity.models.token import RefreshToken
from parity.models.user import User
from parity.repositories.user_repo import UserRepository, UserAccountRepository
from parity.repositories.token_repo import TokenRepository
from parity.schemas.token import TokenResponse
import logging

logger = logging.getLogger(__name__)



class AuthService:
    def __init__(
        self,
        user_repo: UserRepository,
        account_repo: UserAccountRepository,
        token_repo: TokenRepository,
        token_settings: TokenSettings,
    ):
        self.user_repo = user_repo
        self.account_repo = account_repo
        self.token_repo = token_repo
        self.token_settings = token_settings


    async def _issue_tokens(self, user: User, ip_address: str | None, user_agent: str | None) -> TokenResponse:
        # jti keeps two refresh tokens issued within the same second distinct
        payload = {"sub": str(user.id), "email": user.email, "jti": uuid4().hex}
        access_token_str = create_access_token(payload, self.token_settings)
        refresh_token_str = create_refresh_token(payload, self.token_settings)
        db_token = RefreshToken(
            token_hash=hash_token(refresh_token_str),
            user_id=user.id,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=self.token_settings.refresh_lifetime),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        await self.token_repo.create(db_token)
        logger.info("Tokens created and stored for user_id=%s", user.id)
        return TokenResponse(access_token=access_token_str, refresh_token=refresh_token_str, token_type="bearer")


    async def login(self, email: str, password: str, ip_address: str | None = None, user_agent: str | None = None) -> TokenResponse:
        account = await self.account_repo.get_by_email(email)
        if not account:
            logger.warning("Login failed: no account for email=%s", email)
            raise UnauthorizedException(detail="Incorrect email or password")
        if not verify_password(password, account.password_hash):
            logger.warning("Login failed: invalid password for email=%s", email)
            raise UnauthorizedException(detail="Incorrect email or password")
        user = await self.user_repo.get_by_email(email)
        if not user:
            logger.error("Account exists without a user row for email=%s", email)
            raise UnauthorizedException(detail="Incorrect email or password")
        logger.info("User logged in successfully: user_id=%s", user.id)
        return await self._issue_tokens(user, ip_address, user_agent)


    async def refresh_access_token(self, refresh_token: str, ip_address: str | None = None, user_agent: str | None = None) -> TokenResponse:
        try:
            payload = verify_refresh_token(refresh_token, self.token_settings)
        except InvalidTokenError:
            raise InvalidTokenError(detail="Invalid refresh token")

        stored_token = await self.token_repo.get_by_token(refresh_token, for_update=True)
        if not stored_token:
            logger.warning("Refresh token not found")
            raise UnauthorizedException(detail="Refresh token not found")
        if stored_token.revoked:
            logger.warning("Refresh token revoked")
            raise UnauthorizedException(detail="Token revoked")
        expires_at = stored_token.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at < datetime.now(timezone.utc):
            logger.warning("Refresh token expired")
            raise UnauthorizedException(detail="Token expired")

        try:
            user_id = UUID(str(payload.sub))
        except ValueError:
            raise InvalidTokenError(detail="Invalid refresh token")
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise UnauthorizedException(detail="Unauthorized User")

        logger.info("Refresh token valid and new tokens are being created for user_id=%s", user.id)
        stored_token.revoked = True
        await self.token_repo.update(stored_token)
        return await self._issue_tokens(user, ip_address, user_agent)

    async def logout(self, refresh_token: str) -> None:
        revoked = await self.token_repo.revoke_token(refresh_token)
        if not revoked:
            logger.warning("Logout attempted with invalid or already revoked token")
            raise UnauthorizedException(detail="Invalid or already revoked token")
        logger.info("User logged out, refresh token revoked")
