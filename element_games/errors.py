from __future__ import annotations


class ElementGamesError(Exception):
    """Base class for every error raised by the game core."""


class CatalogError(ElementGamesError):
    """The element data file is missing, unreadable or inconsistent."""


class InsufficientCatalogError(ElementGamesError):
    """A generator needs more distinct elements than the catalog holds."""

    def __init__(self, required: int, available: int, what: str = "this game"):
        self.required = required
        self.available = available
        super().__init__(
            f"{what} needs at least {required} elements, catalog has {available}"
        )


class InvalidConfigError(ElementGamesError):
    """A configuration value is out of range."""
