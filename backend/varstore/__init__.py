"""Application Variable Store.

Secret-aware key/value variables scoped to applications, with
transparent encryption, placeholder redaction and a snapshot audit trail.
"""

__version__ = "0.1.0"
