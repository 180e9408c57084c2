"""Errors raised by reading store adapters."""


class StoreError(Exception):
    """Base class for failures talking to the reading store."""


class StoreUnavailableError(StoreError):
    """The store could not be reached or timed out."""
