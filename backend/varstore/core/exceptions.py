"""Exception hierarchy for the variable store.

All errors inherit from VariableStoreError so callers can catch the
whole family at the boundary of the surrounding service. Storage driver
errors are wrapped and chained, never swallowed.
"""


class VariableStoreError(Exception):
    """Base exception for all variable store errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(VariableStoreError):
    """Raised when a lookup, update or delete matched zero rows."""


class ApplicationNotFoundError(NotFoundError):
    """Raised when no application matches the given scope."""


class VariableNotFoundError(NotFoundError):
    """Raised when the variable is not in the application."""

    def __init__(self, application_id: str, name: str) -> None:
        super().__init__(f"Variable '{name}' not in application {application_id}")
        self.application_id = application_id
        self.name = name


class AuditNotFoundError(NotFoundError):
    """Raised when no audit snapshot matches the identifier/owner pair."""


class VariableExistsError(VariableStoreError):
    """Raised when inserting a variable whose name is already taken."""

    def __init__(self, application_id: str, name: str) -> None:
        super().__init__(f"Variable '{name}' already exists in application {application_id}")
        self.application_id = application_id
        self.name = name


class CodecError(VariableStoreError):
    """Raised when encryption, decryption or token encoding fails."""


class StorageError(VariableStoreError):
    """Raised for any other persistence failure."""


class SerializationError(VariableStoreError):
    """Raised when an audit snapshot cannot be encoded or decoded."""
