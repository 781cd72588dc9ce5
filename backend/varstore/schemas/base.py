"""Base schemas and enums for the application variable store."""

from enum import Enum

from varstore.core.exceptions import CodecError

# Substituted for secret values in every unprivileged read
PASSWORD_PLACEHOLDER = "**********"


class VariableType(str, Enum):
    """Declared kind of an application variable."""

    STRING = "string"
    TEXT = "text"
    BOOLEAN = "boolean"
    NUMBER = "number"
    REPOSITORY = "repository"
    PASSWORD = "password"  # Secret
    KEY = "key"  # Secret

    @classmethod
    def from_string(cls, value: str) -> "VariableType":
        """Parse a stored type string.

        Raises:
            CodecError: If the kind is not recognized.
        """
        try:
            return cls(value)
        except ValueError as e:
            raise CodecError(f"Unknown variable type '{value}'") from e


# Kinds whose plaintext must never appear in unprivileged output
SECRET_TYPES: frozenset[VariableType] = frozenset({VariableType.PASSWORD, VariableType.KEY})


class ReadMode(str, Enum):
    """How secret values are presented on a read path."""

    PLAINTEXT = "plaintext"  # Privileged
    ENCRYPTED = "encrypted"  # Cipher token, for copying between encrypted stores
    REDACTED = "redacted"  # Sentinel placeholder
