"""Identity asserted by a bearer token."""

from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID


@dataclass
class TokenUser:
    """Identity-provider subject and the profile fields it shares with us.

    ``id`` becomes the primary key of the mirrored ``users`` row.
    """

    id: UUID
    email: str
    display_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


class IAuthProvider(Protocol):
    """Turns bearer tokens into identities."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """The identity carried by ``token``, or None when it is not acceptable."""
        ...

    def create_token(self, user: TokenUser) -> str: ...
