from uuid import UUID
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from parity.core.security import hash_token
from parity.models.email_verification import EmailVerificationToken
from parity.repositories.base import BaseRepository


class EmailVerificationRepository(BaseRepository[EmailVerificationToken]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, EmailVerificationToken)

    async def get_by_token(self, token: str) -> EmailVerificationToken | None:
        query = select(EmailVerificationToken).where(
            EmailVerificationToken.token_hash == hash_token(token)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def mark_used(self, verification_token: EmailVerificationToken) -> None:
        verification_token.used = True
        await self.db.flush()

    async def revoke_all_for_user(self, user_id: UUID) -> None:
        stmt = (
            update(EmailVerificationToken)
            .where(
                EmailVerificationToken.user_id == user_id,
                EmailVerificationToken.used == False,
            )
            .values(used=True)
        )
        await self.db.execute(stmt)
        await self.db.flush()
