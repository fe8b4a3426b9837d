"""
Account Models

Registered users and the active login session. These belong to the
local account facet; the expense core only consumes the session's
`user_id` as the identity its storage key is derived from.

NOTE: The stored credential is a digest for a local check,
not a security boundary.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class User(BaseModel):
    """A registered account."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(
        ...,
        description="Stable user identifier, used in storage keys"
    )
    username: str = Field(
        ...,
        min_length=3,
        max_length=20,
    )
    password_hash: str = Field(
        ...,
        alias="password",
        description="Digest of the password"
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class Session(BaseModel):
    """The currently logged-in user."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    username: str
    login_time: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class AccountResult(BaseModel):
    """Outcome of a register or login attempt."""

    success: bool
    message: str
    session: Optional[Session] = None
