from __future__ import annotations


class HexTetrisError(Exception):
    """Base class for engine errors."""


class InvalidCoordinateKeyError(HexTetrisError, ValueError):
    """A coordinate key could not be parsed back into an axial coordinate."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Invalid axial key: {key!r}")
