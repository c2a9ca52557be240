"""Repository ports for the auth domain."""

from abc import abstractmethod
from typing import Protocol

from immersion.domain.auth.model.user import User
from immersion.domain.auth.model.value import UserId
from immersion.domain.shared.port import Port


class UserRepository(Port, Protocol):
    """Repository for User aggregate persistence."""

    @abstractmethod
    async def get_by_id(self, user_id: UserId) -> User | None:
        """Get a user by ID."""
        ...

    @abstractmethod
    async def get_by_ids(self, user_ids: list[UserId]) -> list[User]:
        """Get the users that exist among the given IDs."""
        ...

    @abstractmethod
    async def save(self, user: User) -> None:
        """Save a user (create or update)."""
        ...
