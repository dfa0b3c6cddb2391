from enum import Enum


class Role(str, Enum):
    """Caller role carried in the access token. Moderators review formed requests."""

    USER = "user"
    MODERATOR = "moderator"
