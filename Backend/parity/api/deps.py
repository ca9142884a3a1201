from functools import lru_cache
from typing import Annotated
from uuid import UUID
from fastapi import Depends
from parity.core.config import get_settings
from parity.core.exceptions import UnauthorizedException
from parity.core.database import get_db
from parity.core.tokens import TokenSettings, verify_access_token
from sqlalchemy.ext.asyncio import AsyncSession
from parity.repositories.user_repo import UserRepository, UserAccountRepository
from parity.repositories.token_repo import TokenRepository
from parity.repositories.email_verification_repo import EmailVerificationRepository
from parity.services.user_service import UserService
from parity.services.auth_service import AuthService
from parity.services.email_verification_service import EmailVerificationService
from fastapi.security import OAuth2PasswordBearer

db_dependency = Annotated[AsyncSession, Depends(get_db)]
reusable_oauth2 = OAuth2PasswordBearer(tokenUrl="/api/v1/sign-in")


@lru_cache
def get_token_settings() -> TokenSettings:
    return TokenSettings.from_settings(get_settings())

token_settings_dependency = Annotated[TokenSettings, Depends(get_token_settings)]


async def get_user_repo(db: db_dependency)-> UserRepository:
    return UserRepository(db)

user_dependency = Annotated[UserRepository, Depends(get_user_repo)]

async def get_account_repo(db: db_dependency) -> UserAccountRepository:
    return UserAccountRepository(db)

account_dependency = Annotated[UserAccountRepository, Depends(get_account_repo)]

async def get_user_service(user_repo: user_dependency, account_repo: account_dependency) -> UserService:
    return UserService(user_repo, account_repo)


async def get_token_repo(db: db_dependency) -> TokenRepository:
    return TokenRepository(db)

token_dependency = Annotated[TokenRepository, Depends(get_token_repo)]

async def get_auth_service(
    user_repo: user_dependency,
    account_repo: account_dependency,
    token_repo: token_dependency,
    token_settings: token_settings_dependency,
) -> AuthService:
    return AuthService(user_repo, account_repo, token_repo, token_settings)


async def get_verification_repo(db: db_dependency) -> EmailVerificationRepository:
    return EmailVerificationRepository(db)

verification_dependency = Annotated[EmailVerificationRepository, Depends(get_verification_repo)]

async def get_email_verification_service(
    user_repo: user_dependency,
    verification_repo: verification_dependency,
) -> EmailVerificationService:
    return EmailVerificationService(user_repo, verification_repo)


async def get_current_user(
    token: Annotated[str, Depends(reusable_oauth2)],
    user_repo: user_dependency,
    token_settings: token_settings_dependency,
):
    payload = verify_access_token(token, token_settings)
    subject = payload.sub
    if not subject:
        raise UnauthorizedException(detail="Unauthorized User")
    try:
        user_id = UUID(str(subject))
    except ValueError:
        raise UnauthorizedException(detail="Unauthorized User")
    user = await user_repo.get_by_id(user_id)
    if not user:
        raise UnauthorizedException(detail="Unauthorized User")
    return user
