"""User directory — username to user id resolution."""

from src.users.service import UserAlreadyExistsError, user_directory

__all__ = ["UserAlreadyExistsError", "user_directory"]
