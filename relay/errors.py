class RelayError(Exception):
    """Base class for errors raised by the message relay."""


class ValidationError(RelayError):
    """A submitted field is missing or empty after sanitization."""


class AuthError(RelayError):
    pass


class NotFoundError(RelayError):
    pass


class StorageError(RelayError):
    """The message store could not read or write durable state."""
