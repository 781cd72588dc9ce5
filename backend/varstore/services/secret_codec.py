"""Secret codec for variable values.

Encrypts secret kinds with Fernet (AES-128-CBC + HMAC-SHA256) and
passes non-secret kinds through unchanged. Key material is injected
explicitly so callers can rotate keys or use fixture keys in tests:
the first key encrypts, every key is tried on decryption.
"""

import logging
from collections.abc import Sequence

from cryptography.fernet import Fernet, InvalidToken, MultiFernet
from pydantic import SecretStr

from varstore.core.config import Settings
from varstore.core.exceptions import CodecError
from varstore.schemas.base import PASSWORD_PLACEHOLDER, SECRET_TYPES, VariableType

logger = logging.getLogger(__name__)

KeyMaterial = SecretStr | str | bytes


def generate_key() -> str:
    """Generate a fresh Fernet key (urlsafe base64 text)."""
    return Fernet.generate_key().decode("ascii")


def _raw_key(key: KeyMaterial) -> bytes:
    if isinstance(key, SecretStr):
        key = key.get_secret_value()
    if isinstance(key, str):
        key = key.encode("ascii")
    return key


class SecretCodec:
    """Per-value encrypt/decrypt given a declared variable type.

    Usage:
        codec = SecretCodec([generate_key()])
        clear, cipher = codec.encrypt(VariableType.PASSWORD, "s3cr3t")
        plaintext = codec.decrypt(VariableType.PASSWORD, clear, cipher, want_plaintext=True)
    """

    def __init__(self, keys: Sequence[KeyMaterial] = ()) -> None:
        """Initialize the codec.

        Args:
            keys: Fernet keys, primary first. May be empty, in which
                case only non-secret kinds can be handled.

        Raises:
            CodecError: If a key is not a valid Fernet key.
        """
        self._fernet: MultiFernet | None = None
        if keys:
            try:
                self._fernet = MultiFernet([Fernet(_raw_key(k)) for k in keys])
            except (ValueError, TypeError) as e:
                raise CodecError(f"Invalid secret key material: {e}") from e
            logger.debug(f"Secret codec initialized with {len(keys)} key(s)")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SecretCodec":
        """Build a codec from configured key material."""
        if not settings.secret_keys:
            logger.warning(
                "No secret key configured (SECRET_KEY not set). "
                "Secret variables cannot be encrypted or decrypted."
            )
        return cls(settings.secret_keys)

    @property
    def has_key(self) -> bool:
        """Check whether key material is available."""
        return self._fernet is not None

    def _require_fernet(self) -> MultiFernet:
        if self._fernet is None:
            raise CodecError("No secret key material available")
        return self._fernet

    def encrypt(
        self,
        variable_type: VariableType | str,
        plaintext: str,
    ) -> tuple[str | None, bytes | None]:
        """Split a value into its clear and cipher representations.

        Args:
            variable_type: Declared kind of the variable
            plaintext: The logical value

        Returns:
            (clear, None) for non-secret kinds, (None, token) for secret kinds

        Raises:
            CodecError: If the kind is unknown or no key is available
        """
        variable_type = VariableType.from_string(variable_type)
        if variable_type not in SECRET_TYPES:
            return plaintext, None

        token = self._require_fernet().encrypt(plaintext.encode("utf-8"))
        return None, token

    def decrypt(
        self,
        variable_type: VariableType | str,
        clear: str | None,
        cipher: bytes | None,
        want_plaintext: bool,
    ) -> str:
        """Rebuild a value from its stored representation.

        Secret kinds only yield plaintext when `want_plaintext` is set;
        otherwise the redaction sentinel is returned.

        Raises:
            CodecError: If the kind is unknown, no key is available or
                the token cannot be decrypted
        """
        variable_type = VariableType.from_string(variable_type)
        if variable_type not in SECRET_TYPES:
            return clear or ""

        if not want_plaintext:
            return PASSWORD_PLACEHOLDER

        if not cipher:
            raise CodecError("Secret variable has no cipher value")

        try:
            return self._require_fernet().decrypt(cipher).decode("utf-8")
        except InvalidToken as e:
            raise CodecError("Unable to decrypt secret value") from e
        except UnicodeDecodeError as e:
            raise CodecError("Decrypted secret value is not valid UTF-8") from e

    def rotate(self, cipher: bytes) -> bytes:
        """Re-encrypt a token under the primary key.

        Raises:
            CodecError: If the token cannot be decrypted with any key
        """
        try:
            return self._require_fernet().rotate(cipher)
        except InvalidToken as e:
            raise CodecError("Unable to rotate secret value") from e
