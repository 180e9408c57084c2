"""Errors raised inside the consistency services."""

from __future__ import annotations


class NotFoundError(LookupError):
    """A station or sensor referenced by a query does not exist."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind} {key!r} not found.")
        self.kind = kind
        self.key = key
