import uuid
from dataclasses import dataclass
from typing import Any

GUEST_NAME = "Guest"

# Tried in order; the first non-blank value wins.
_NAME_FIELDS = ("full_name", "first_name", "username", "email_address")


@dataclass(frozen=True)
class Identity:
    user_id: str
    display_name: str


def display_name_for(user: Any) -> str:
    """Best display name for an identity-provider user.

    Falls back from full name to first name, username and email address, and
    finally to ``"Guest"`` for anonymous or incomplete users. *user* may be
    a mapping or any object exposing those attributes.
    """
    if user is None:
        return GUEST_NAME
    for name in _NAME_FIELDS:
        value = user.get(name) if isinstance(user, dict) else getattr(user, name, None)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return GUEST_NAME


def identity_for(user: Any) -> Identity:
    """Identity for a signed-in user. ``user.id`` (or ``user["id"]``) is required."""
    user_id = user.get("id") if isinstance(user, dict) else getattr(user, "id", None)
    if not user_id:
        raise ValueError("user has no id")
    return Identity(user_id=str(user_id), display_name=display_name_for(user))


def new_meeting_id() -> str:
    """Fresh id for a meeting the current user is about to host."""
    return str(uuid.uuid4())
