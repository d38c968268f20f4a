"""
Exam Builder Backend — User SQLAlchemy Model
==============================================

What:  ORM model for the `users` table (teachers and administrators).
Who:   Loaded and written by SqlAlchemyUserRepository; read by Alembic.

Table Design:
    - Integer autoincrement primary key; ids are never reused
      (sqlite_autoincrement keeps that true on the SQLite test database)
    - email carries a UNIQUE index, the storage-level backstop for
      concurrent creates racing past the service's uniqueness check
    - password is stored but never selected into a response schema
    - created_at / updated_at are timezone-aware UTC timestamps
"""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Role(str, Enum):
    ADMIN = "ADMIN"
    PROFESSOR = "PROFESSOR"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A teacher or admin account.

    Lifecycle:
        1. Created by UserService.create_user after validation
        2. Mutated only by UserService.update_user (partial merge)
        3. Removed by UserService.delete_user
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(Text, nullable=False)

    email: Mapped[str] = mapped_column(Text, nullable=False)

    # Write-only: accepted on input, excluded from every response schema
    password: Mapped[str] = mapped_column(Text, nullable=False)

    photo: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    # Stored as the enum value; String keeps the column portable across dialects
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=Role.PROFESSOR.value,
        server_default=text("'PROFESSOR'"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("users_email_key", "email", unique=True),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
