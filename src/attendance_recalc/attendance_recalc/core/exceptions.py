class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced employee (or other root entity) does not exist."""


class FormatError(DomainError):
    """Raised when an encoded shift template string is malformed."""


class DataIntegrityError(DomainError):
    """Raised when stored data references rows that no longer exist.

    Example: an employee assigned to a shift template id that was deleted.
    """
