import asyncio
from datetime import datetime, timezone
from sqlalchemy import delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from parity.core.database import AsyncSessionLocal
from parity.models.token import RefreshToken
from parity.models.email_verification import EmailVerificationToken
import logging

logger = logging.getLogger(__name__)

async def cleanup_expired_tokens(session: AsyncSession) -> tuple[int, int]:
    now = datetime.now(timezone.utc)
    stmt = delete(RefreshToken).where(
        or_(
            RefreshToken.expires_at < now,
            RefreshToken.revoked == True
        )
    ).execution_options(synchronize_session=False)
    result = await session.execute(stmt)

    # Clean up expired/used email verification tokens
    verification_stmt = delete(EmailVerificationToken).where(
        or_(
            EmailVerificationToken.expires_at < now,
            EmailVerificationToken.used == True
        )
    ).execution_options(synchronize_session=False)
    verification_result = await session.execute(verification_stmt)
    await session.commit()
    logger.info("Cleaned up %d expired/used email verification tokens", verification_result.rowcount)
    logger.info("Cleaned up %d expired/revoked refresh tokens", result.rowcount)
    return result.rowcount, verification_result.rowcount


async def _main():
    async with AsyncSessionLocal() as session:
        await cleanup_expired_tokens(session)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_main())
