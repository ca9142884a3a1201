from parity.schemas.user import RegisterUserRequest
from parity.core.exceptions import ConflictException
from parity.models.user import User, UserAccount
from parity.repositories.user_repo import UserRepository, UserAccountRepository, normalize_email
from parity.core.security import get_password_hash
from sqlalchemy.exc import IntegrityError
import logging

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, user_repo: UserRepository, account_repo: UserAccountRepository):
        self.user_repo = user_repo
        self.account_repo = account_repo

    async def create_user(self, user_in: RegisterUserRequest) -> User:
        email = normalize_email(user_in.email)
        if await self.user_repo.get_by_email(email):
            logger.warning("Attempt to create user with existing email: %s", email)
            raise ConflictException(detail="Email already registered")

        hashed_password = get_password_hash(user_in.password)
        try:
            created_user = await self.user_repo.create(User(email=email))
            await self.account_repo.create(UserAccount(email=email, password_hash=hashed_password))
            logger.info("User created successfully: user_id=%s", created_user.id)
            return created_user
        except IntegrityError:
            logger.error("IntegrityError during user creation for email=%s", email)
            raise ConflictException(detail="Email already registered (Race Condition detected)")
