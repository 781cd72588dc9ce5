"""Services for the application variable store."""

from varstore.services.placeholder import is_placeholder_write, needs_placeholder, present_value
from varstore.services.secret_codec import SecretCodec, generate_key
from varstore.services.variable_audit import VariableAuditService
from varstore.services.variable_store import VariableStore

__all__ = [
    "SecretCodec",
    "generate_key",
    "is_placeholder_write",
    "needs_placeholder",
    "present_value",
    "VariableAuditService",
    "VariableStore",
]
