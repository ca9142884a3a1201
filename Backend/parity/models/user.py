from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, DateTime, Boolean, ForeignKey
from parity.core.database import Base, CreatedAtMixin
from uuid import UUID, uuid4

class User(CreatedAtMixin, Base):
    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4, index=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    email_verified: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    email_is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    account: Mapped["UserAccount"] = relationship(back_populates="user", cascade="all, delete-orphan")
    tokens: Mapped[list["RefreshToken"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    verification_tokens: Mapped[list["EmailVerificationToken"]] = relationship(back_populates="user", cascade="all, delete-orphan")


class UserAccount(Base):
    """Password credentials, kept apart from the user row."""
    __tablename__ = "user_accounts"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(ForeignKey("users.email", ondelete="CASCADE"), unique=True)
    password_hash: Mapped[str] = mapped_column(String)
    user: Mapped["User"] = relationship(back_populates="account")
