"""Shared FastAPI dependencies."""

from uuid import UUID

from fastapi import Header


async def get_user_id(x_user_id: UUID = Header(..., alias="X-User-Id")) -> UUID:
    """Resolve the calling user.

    Authentication lives in front of this service; callers pass the user's
    UUID in the ``X-User-Id`` header.
    """
    return x_user_id
