"""Centralized exceptions for the Postshelf application."""


class PostshelfError(Exception):
    """Base exception for all Postshelf errors."""


class ConfigError(PostshelfError):
    """Raised when the site configuration cannot be loaded or is invalid."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load configuration at '{path}': {reason}")
