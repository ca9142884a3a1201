import secrets
from datetime import datetime, timedelta, timezone

from parity.core.config import get_settings
from parity.core.exceptions import BadRequestException, NotFoundException
from parity.core.security import hash_token
from parity.models.email_verification import EmailVerificationToken
from parity.models.user import User
from parity.repositories.email_verification_repo import EmailVerificationRepository
from parity.repositories.user_repo import UserRepository
import logging

logger = logging.getLogger(__name__)


class EmailVerificationService:
    def __init__(
        self,
        user_repo: UserRepository,
        verification_repo: EmailVerificationRepository,
    ):
        self.user_repo = user_repo
        self.verification_repo = verification_repo

    async def request_verification(
        self,
        email: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> str | None:
        """
        Issue an email verification link for the given address.
        Returns the raw token if one was issued, None if the user does not
        exist or is already verified. Callers should answer with the same
        generic message either way to prevent email enumeration.
        """
        settings = get_settings()
        user = await self.user_repo.get_by_email(email)

        if not user:
            logger.info("Email verification requested for non-existent email: %s", email)
            return None
        if user.email_is_verified:
            logger.info("Email verification requested for already verified user_id=%s", user.id)
            return None

        # Only the newest link stays valid
        await self.verification_repo.revoke_all_for_user(user.id)

        raw_token = secrets.token_urlsafe(32)
        verification_token = EmailVerificationToken(
            token_hash=hash_token(raw_token),
            user_id=user.id,
            expires_at=datetime.now(timezone.utc)
            + timedelta(minutes=settings.EMAIL_VERIFICATION_TOKEN_EXPIRE_MINUTES),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        await self.verification_repo.create(verification_token)

        # No mail transport is wired in; the link goes to the log.
        logger.info(
            "Email verification link generated for user_id=%s | link=%s/verify-email?token=%s",
            user.id,
            settings.APP_URL.rstrip("/"),
            raw_token,
        )

        return raw_token

    async def verify(self, token: str) -> User:
        stored_token = await self.verification_repo.get_by_token(token)

        if not stored_token:
            logger.warning("Email verification attempted with invalid token")
            raise BadRequestException(detail="Invalid or expired verification token")

        if stored_token.used:
            logger.warning("Email verification attempted with already-used token")
            raise BadRequestException(detail="Invalid or expired verification token")

        expires_at = stored_token.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at < datetime.now(timezone.utc):
            logger.warning("Email verification attempted with expired token")
            raise BadRequestException(detail="Invalid or expired verification token")

        user = await self.user_repo.get_by_id(stored_token.user_id)
        if not user:
            logger.error("Verification token references non-existent user_id=%s", stored_token.user_id)
            raise NotFoundException(detail="User not found")

        user.email_is_verified = True
        user.email_verified = datetime.now(timezone.utc)
        await self.user_repo.update(user)
        await self.verification_repo.mark_used(stored_token)

        logger.info("Email verified for user_id=%s", user.id)
        return user
