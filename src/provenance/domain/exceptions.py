"""Errors raised by the provenance tracker."""


class TrackerError(Exception):
    """Base class for all tracker errors."""


class DuplicateIdError(TrackerError):
    """A product with the same id is already registered."""


class NotFoundError(TrackerError):
    """No product matches the given id."""


class TokenMismatchError(TrackerError):
    """The supplied token does not authenticate the target product."""


class InvalidStatusError(TrackerError, ValueError):
    """The requested status is not a known lifecycle state."""
