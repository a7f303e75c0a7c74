"""Database exceptions."""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class NotFoundError(DatabaseError):
    """Base exception for missing records."""

    pass


class UserNotFoundError(NotFoundError):
    """Raised when a user is not found."""

    pass


class EnrollmentNotFoundError(NotFoundError):
    """Raised when a voice enrollment is not found."""

    pass


class DocumentNotFoundError(NotFoundError):
    """Raised when a document is not found."""

    pass


class RecipientNotFoundError(NotFoundError):
    """Raised when a recipient is not found for a signing token."""

    pass


class FieldNotFoundError(NotFoundError):
    """Raised when a field is not found or not signable by the recipient."""

    pass
