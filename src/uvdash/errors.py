from __future__ import annotations


class UvDashError(Exception):
    """Base class for errors raised by uvdash."""


class MalformedRecord(UvDashError, ValueError):
    """A raw UV feed record cannot be turned into a canonical reading."""

    def __init__(self, message: str, *, record: object = None) -> None:
        super().__init__(message)
        self.record = record


class MalformedTimestamp(MalformedRecord):
    """The vendor date string does not match ``Mon/DD/YYYY HH AM|PM``."""

    def __init__(self, text: object, *, record: object = None) -> None:
        super().__init__(f"malformed vendor timestamp: {text!r}", record=record)
        self.text = text


class FetchError(UvDashError):
    """An external collaborator failed (network, HTTP status, bad payload)."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class ResolutionError(UvDashError):
    """Coordinates or a postal code could not be resolved."""
