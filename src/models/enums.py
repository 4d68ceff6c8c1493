"""Domain enums used across SQLAlchemy models and Pydantic schemas.

All enums use str mixin for JSON serialization.
"""

from __future__ import annotations

from enum import Enum


class UserActionType(str, Enum):
    """Kinds of audited user actions, stored verbatim in user_actions.action."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    FAVOURITE = "favourite"
    UNFAVOURITE = "unfavourite"
