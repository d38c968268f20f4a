"""
Exam Builder Backend — User Persistence Gateway
=================================================

What:  The data-access contract the user service depends on, plus its
       SQLAlchemy implementation.
Why:   UserService receives a repository at construction time instead of
       reaching for a global session, so tests swap in an in-memory fake
       and the service never imports SQLAlchemy.
How:   SqlAlchemyUserRepository issues queries on the request-scoped
       AsyncSession and flushes writes; get_db_session() commits.

Storage-level uniqueness:
    The service checks email uniqueness before writing, but two concurrent
    requests can both pass that check. The unique index on users.email
    rejects the second write; this module turns that IntegrityError into
    DuplicateEmailError (insert) or EmailInUseError (update).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DuplicateEmailError, EmailInUseError
from app.models.user import User

logger = logging.getLogger(__name__)

# Constraint name on PostgreSQL, column reference in SQLite's message
_EMAIL_CONFLICT_MARKERS = ("users_email_key", "users.email")


class UserRepository(ABC):
    """
    CRUD primitives against the users table.

    Contract:
        - find_* return None (or an empty list) when nothing matches
        - insert/update return the stored row with id and timestamps set
        - unique-email violations surface as DuplicateEmailError on insert
          and EmailInUseError on update
        - any other storage failure propagates unchanged
    """

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def find_all(self) -> List[User]:
        """All users, newest first."""
        ...

    @abstractmethod
    async def insert(self, values: Mapping[str, Any]) -> User:
        ...

    @abstractmethod
    async def update(self, user_id: int, changes: Mapping[str, Any]) -> Optional[User]:
        """Applies `changes` to the row and returns it, or None if it vanished."""
        ...

    @abstractmethod
    async def delete(self, user_id: int) -> bool:
        """Removes the row. Returns False when there was nothing to delete."""
        ...


def _is_email_conflict(exc: IntegrityError) -> bool:
    detail = str(exc.orig if exc.orig is not None else exc)
    return any(marker in detail for marker in _EMAIL_CONFLICT_MARKERS)


class SqlAlchemyUserRepository(UserRepository):
    """UserRepository backed by an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, user_id: int) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_all(self) -> List[User]:
        # id breaks ties between rows created within the same clock tick
        result = await self.session.execute(
            select(User).order_by(User.created_at.desc(), User.id.desc())
        )
        return list(result.scalars().all())

    async def insert(self, values: Mapping[str, Any]) -> User:
        user = User(**dict(values))
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            if _is_email_conflict(exc):
                logger.info("Unique index rejected insert for email %s", values.get("email"))
                raise DuplicateEmailError(email=values.get("email")) from exc
            raise
        return user

    async def update(self, user_id: int, changes: Mapping[str, Any]) -> Optional[User]:
        user = await self.find_by_id(user_id)
        if user is None:
            return None

        for field, value in changes.items():
            setattr(user, field, value)

        try:
            await self.session.flush()
        except IntegrityError as exc:
            if _is_email_conflict(exc):
                logger.info("Unique index rejected update of user %s", user_id)
                raise EmailInUseError(email=changes.get("email")) from exc
            raise
        return user

    async def delete(self, user_id: int) -> bool:
        result = await self.session.execute(delete(User).where(User.id == user_id))
        await self.session.flush()
        return bool(result.rowcount)

