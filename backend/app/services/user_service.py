"""
Exam Builder Backend — User Service (Business Rules)
======================================================

What:  Validation, email uniqueness, partial-update merging and the
       orchestration of repository calls for user records.
Why:   The only place business rules live. Routes translate its outcomes
       to HTTP; the repository only stores rows.
Who:   Constructed per request by routes.users.get_user_service with a
       SqlAlchemyUserRepository; constructed by tests with an in-memory fake.

Operation outcomes:
    list_users   → List[UserResponse]
    get_user     → UserResponse, or None when no row exists (→ 404)
    create_user  → UserResponse                 | MissingFields, DuplicateEmail
    update_user  → UserResponse                 | InvalidInput, NotFound, EmailInUse
    delete_user  → DeletedUser snapshot         | InvalidInput, NotFound
    Any repository failure not in the taxonomy → UnexpectedError (→ 500)

Validation order (update): id format → existence → email uniqueness → merge.

Email policy:
    Emails are stripped and lower-cased before validation, comparison and
    storage, so "A@X.com" and "a@x.com" are the same account.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from app.exceptions import (
    DuplicateEmailError,
    EmailInUseError,
    ExamBuilderError,
    InvalidInputError,
    MissingFieldsError,
    NotFoundError,
    UnexpectedError,
)
from app.models.user import Role
from app.repositories.user_repository import UserRepository
from app.schemas.user import DeletedUser, UserResponse

logger = logging.getLogger(__name__)

REQUIRED_CREATE_FIELDS = ("name", "email", "password")
MERGEABLE_FIELDS = ("name", "email", "password", "role", "photo")


def parse_user_id(raw: Any) -> int:
    """
    Accepts positive integers and strings of ASCII digits ("42").

    Raises InvalidInputError for anything else: "abc", "0", "-1", "1.5",
    booleans and None.
    """
    if isinstance(raw, bool):
        raise InvalidInputError(context={"id": raw})
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdigit():
        value = int(raw.strip())
    else:
        raise InvalidInputError(context={"id": raw})

    if value <= 0:
        raise InvalidInputError(context={"id": raw})
    return value


def _clean_str(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _normalize_role(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, Role):
        return value.value
    try:
        return Role(str(value).strip().upper()).value
    except ValueError:
        raise InvalidInputError(
            message=f"Invalid role '{value}'. Must be one of: ADMIN, PROFESSOR",
            context={"role": value},
        ) from None


def normalize_user_data(data: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Request-normalization step run before any validation.

    Keeps only the user fields, strips strings, lower-cases email and
    converts role to its stored value. Keys absent from `data` stay absent.
    """
    if not data:
        return {}

    normalized: Dict[str, Any] = {}
    for field in MERGEABLE_FIELDS:
        if field not in data:
            continue
        value = _clean_str(data[field])
        if field == "email" and isinstance(value, str):
            value = value.lower()
        elif field == "role":
            value = _normalize_role(value)
        normalized[field] = value
    return normalized


class UserService:
    """
    Business operations on user records.

    Stateless apart from the injected repository; build one per request.
    """

    def __init__(
        self,
        repository: UserRepository,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.repository = repository
        self.clock = clock

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_users(self) -> List[UserResponse]:
        """All users without passwords, newest first."""
        try:
            users = await self.repository.find_all()
        except Exception as e:
            raise self._unexpected("Error listing users", e) from e
        return [UserResponse.model_validate(user) for user in users]

    async def get_user(self, raw_id: Any) -> Optional[UserResponse]:
        """
        Looks a user up by primary key.

        Returns None when no row exists so the caller can tell "not found"
        (404) apart from a malformed id (InvalidInputError, 400).
        """
        user_id = parse_user_id(raw_id)
        try:
            user = await self.repository.find_by_id(user_id)
        except Exception as e:
            raise self._unexpected("Error fetching user", e) from e

        if user is None:
            return None
        return UserResponse.model_validate(user)

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_user(self, data: Optional[Mapping[str, Any]]) -> UserResponse:
        """
        Validates, checks email uniqueness and inserts a new user.

        Raises:
            MissingFieldsError: name, email or password absent or blank
            DuplicateEmailError: email already registered
        """
        values = normalize_user_data(data)

        missing = [field for field in REQUIRED_CREATE_FIELDS if not values.get(field)]
        if missing:
            raise MissingFieldsError(fields=missing)

        try:
            if await self.repository.find_by_email(values["email"]) is not None:
                raise DuplicateEmailError(email=values["email"])

            user = await self.repository.insert(
                {
                    "name": values["name"],
                    "email": values["email"],
                    "password": values["password"],
                    "role": values.get("role") or Role.PROFESSOR.value,
                    "photo": values.get("photo") or None,
                }
            )
        except ExamBuilderError:
            raise
        except Exception as e:
            raise self._unexpected("Error creating user", e) from e

        logger.info("User %s created (role=%s)", user.id, user.role)
        return UserResponse.model_validate(user)

    async def update_user(self, raw_id: Any, data: Optional[Mapping[str, Any]]) -> UserResponse:
        """
        Merges the explicitly provided fields into an existing user.

        name, email, password and role are applied when given a non-empty
        value; photo is applied whenever the key is present, so an explicit
        null clears it. updated_at is refreshed even when nothing else changes.

        Raises:
            InvalidInputError: malformed id
            NotFoundError: no user with that id
            EmailInUseError: the new email belongs to another user
        """
        user_id = parse_user_id(raw_id)

        try:
            existing = await self.repository.find_by_id(user_id)
            if existing is None:
                raise NotFoundError(resource="User", resource_id=user_id)

            values = normalize_user_data(data)

            new_email = values.get("email")
            if new_email and new_email != existing.email:
                if await self.repository.find_by_email(new_email) is not None:
                    raise EmailInUseError(email=new_email)

            changes: Dict[str, Any] = {}
            for field in ("name", "email", "password", "role"):
                if values.get(field):
                    changes[field] = values[field]
            if "photo" in values:
                changes["photo"] = values["photo"] or None
            changes["updated_at"] = self.clock()

            user = await self.repository.update(user_id, changes)
            if user is None:
                raise NotFoundError(resource="User", resource_id=user_id)
        except ExamBuilderError:
            raise
        except Exception as e:
            raise self._unexpected("Error updating user", e) from e

        logger.info(
            "User %s updated (fields=%s)",
            user_id,
            ", ".join(sorted(k for k in changes if k not in ("password", "updated_at"))) or "none",
        )
        return UserResponse.model_validate(user)

    async def delete_user(self, raw_id: Any) -> DeletedUser:
        """
        Deletes a user and returns the {id, name, email} captured beforehand.

        Raises:
            InvalidInputError: malformed id
            NotFoundError: no user with that id
        """
        user_id = parse_user_id(raw_id)

        try:
            existing = await self.repository.find_by_id(user_id)
            if existing is None:
                raise NotFoundError(resource="User", resource_id=user_id)

            snapshot = DeletedUser(id=existing.id, name=existing.name, email=existing.email)
            await self.repository.delete(user_id)
        except ExamBuilderError:
            raise
        except Exception as e:
            raise self._unexpected("Error deleting user", e) from e

        logger.info("User %s deleted", user_id)
        return snapshot

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _unexpected(message: str, error: Exception) -> UnexpectedError:
        logger.error("%s: %s", message, str(error), exc_info=True)
        return UnexpectedError(message=message, original=error)
