"""
Error taxonomy for the mint and resale profit tracker.

Every failure raised by the pipeline derives from TrackerError so the entry
point can abort the run with a single handler. None of these are retried.
"""

from typing import Optional


class TrackerError(Exception):
    """Base class for all pipeline failures."""


class NetworkError(TrackerError):
    """Transport or HTTP failure while talking to a remote endpoint."""


class SchemaError(TrackerError):
    """
    A transaction does not match the expected field layout.

    Attributes:
        path: Field path that could not be resolved or parsed
        schema_version: Version of the field-schema used for extraction
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        schema_version: Optional[str] = None
    ):
        self.path = path
        self.schema_version = schema_version
        if path:
            message = f"{message} (at {path})"
        super().__init__(message)


class CollectionLookupError(TrackerError, LookupError):
    """A collection contract identifier has no registered display name."""


class PriceLookupError(TrackerError, LookupError):
    """The price oracle cannot price a currency at the requested time."""
