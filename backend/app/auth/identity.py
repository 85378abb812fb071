# app/auth/identity.py
"""
Caller identity produced by the auth guard.

The identity is INTERNAL ONLY and must not be returned to clients: it carries
the raw bearer token so logout can revoke exactly the session in use.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.user import User


@dataclass(frozen=True)
class CallerIdentity:
    """
    Attributes:
        user_id: Id of the authenticated user. Every owner-scoped query filters on it.
        token: The exact bearer token presented with this request.
        user: The loaded User row.
    """

    user_id: str
    token: str = field(repr=False)
    user: "User" = field(repr=False, compare=False)
