"""Customer account helpers for the admin user listing."""

from __future__ import annotations

from typing import Any, Iterable

DEMO_EMAIL_DOMAIN = "@tapacademy.com"

# Fields exposed by the admin user listing
PUBLIC_USER_FIELDS = (
    "_id",
    "email",
    "name",
    "createdAt",
    "lastLogin",
    "phone",
    "address",
    "profileImage",
    "preferences",
)


def is_demo_user(user: dict[str, Any]) -> bool:
    """Whether an account looks like a test or demo login."""
    email = str(user.get("email") or "").lower()
    name = str(user.get("name") or "").lower()
    return (
        email.endswith(DEMO_EMAIL_DOMAIN)
        or "+test" in email
        or email.startswith("test")
        or "test user" in name
        or "demo user" in name
    )


def public_users(users: Iterable[dict[str, Any]], *, include_demo: bool = False) -> list[dict[str, Any]]:
    """Project users to their public fields, dropping demo accounts unless asked."""
    return [
        {field: user[field] for field in PUBLIC_USER_FIELDS if field in user}
        for user in users
        if include_demo or not is_demo_user(user)
    ]
