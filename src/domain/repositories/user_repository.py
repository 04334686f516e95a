"""User repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.user import User


class IUserRepository(Protocol):
    """Repository interface for User entities."""

    async def get(self, id: UUID) -> User | None:
        """Get a user by ID."""
        ...

    async def create(self, user: User) -> User:
        """Create a new user."""
        ...

    async def update(self, user: User) -> User:
        """Persist identity fields and flags of an existing user."""
        ...

    async def list_all(self, limit: int = 100, offset: int = 0) -> list[User]:
        """List users, newest first."""
        ...
