"""Custom exception hierarchy for stone-river."""


class PortalError(Exception):
    """Base exception for all stone-river errors."""


class EntityNotFoundError(PortalError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class ConfigurationError(PortalError):
    """Raised when configuration is invalid or missing."""


class StoreError(PortalError):
    """Raised when a read or write against the backing store fails."""


class SinkError(PortalError):
    """Raised when a sink operation fails."""


class InputFileError(PortalError):
    """Raised when an input file is missing, malformed or unsupported."""
