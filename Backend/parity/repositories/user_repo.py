from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from parity.models.user import User, UserAccount
from parity.repositories.base import BaseRepository


def normalize_email(email: str) -> str:
    """Emails are stored and looked up lowercased so one address maps to one user."""
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def get_by_email(self, email: str) -> User | None:
        query = select(User).where(User.email == normalize_email(email))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()


class UserAccountRepository(BaseRepository[UserAccount]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, UserAccount)

    async def get_by_email(self, email: str) -> UserAccount | None:
        query = select(UserAccount).where(UserAccount.email == normalize_email(email))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
