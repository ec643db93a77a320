"""Error types raised by the memoization layer."""

from __future__ import annotations


class InvalidCapacityError(ValueError):
    """Raised when a cache capacity is not a positive integer."""


class UnencodableArgumentError(TypeError):
    """Raised when call arguments cannot be turned into a stable cache key."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot encode {path}: {reason}")
        self.path = path
        self.reason = reason
