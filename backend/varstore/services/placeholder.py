"""Placeholder protocol for secret variables.

Decides, per variable kind and per read mode, whether a caller sees
plaintext, the opaque cipher token or the redaction sentinel. The codec
alone is never trusted to redact: every read path goes through
`present_value`.
"""

from varstore.core.exceptions import CodecError
from varstore.schemas.base import PASSWORD_PLACEHOLDER, SECRET_TYPES, ReadMode, VariableType
from varstore.services.secret_codec import SecretCodec


def needs_placeholder(variable_type: VariableType) -> bool:
    """Check if a variable kind must be hidden from unprivileged reads."""
    return variable_type in SECRET_TYPES


def is_placeholder_write(variable_type: VariableType, value: str) -> bool:
    """Check if a write is a redacted read sent back unchanged.

    When a batch of variables is read in redacted mode and written back,
    secret entries still carry the sentinel. Those must not overwrite
    the stored secret.
    """
    return needs_placeholder(variable_type) and value == PASSWORD_PLACEHOLDER


def cipher_to_token(cipher: bytes | None) -> str:
    """Expose a stored cipher blob as text.

    Raises:
        CodecError: If the blob is missing or not text-safe
    """
    if not cipher:
        raise CodecError("Secret variable has no cipher value")
    try:
        return cipher.decode("ascii")
    except UnicodeDecodeError as e:
        raise CodecError("Cipher value is not a text token") from e


def present_value(
    codec: SecretCodec,
    variable_type: VariableType,
    clear: str | None,
    cipher: bytes | None,
    mode: ReadMode,
) -> str:
    """Produce the caller-visible value of a stored variable.

    Args:
        codec: Secret codec holding the key material
        variable_type: Declared kind of the variable
        clear: Stored clear column
        cipher: Stored cipher column
        mode: Read mode requested by the caller

    Returns:
        Plaintext, cipher token or redaction sentinel
    """
    if not needs_placeholder(variable_type):
        return codec.decrypt(variable_type, clear, cipher, want_plaintext=False)

    mode = ReadMode(mode)
    if mode is ReadMode.PLAINTEXT:
        return codec.decrypt(variable_type, clear, cipher, want_plaintext=True)
    if mode is ReadMode.ENCRYPTED:
        return cipher_to_token(cipher)
    return PASSWORD_PLACEHOLDER
