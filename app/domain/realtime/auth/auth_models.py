"""Authentication domain models."""

from pydantic import BaseModel


class AuthenticatedUser(BaseModel):
    """Identity bound to a connection after token verification."""

    user_id: str
    expires_at: float | None = None
