"""User model type definitions for database operations."""

from typing import TypedDict


class User(TypedDict):
    """users table row representation.

    ``(username, site)`` and ``(email, site)`` are each unique. The
    password_hash column is only ever read by the authentication service.
    """

    id: int
    username: str
    password_hash: str
    email: str
    role: str
    site: str


class UserCreate(TypedDict):
    """Data required to insert a new user."""

    username: str
    password_hash: str
    email: str
    site: str
