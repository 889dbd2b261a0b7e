"""
Custom exceptions for nearbytes.

Every public operation either returns a complete, verified result or
raises one of these. Library exceptions are translated at the boundary
where they occur.
"""


class NearbytesError(Exception):
    """Base exception for all nearbytes errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(NearbytesError):
    """Raised when caller-supplied input is rejected before any I/O."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Validation failed for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value


class InvalidSecretError(ValidationError):
    """Raised when a secret does not meet the minimum requirements.

    The offending secret is never stored on the exception.
    """

    def __init__(self, reason: str):
        super().__init__("secret", reason)


class InvalidHashError(ValidationError):
    """Raised when a content hash is not a 64-character hex string."""

    def __init__(self, value: str):
        super().__init__("hash", "must be a 64-character hex string", value[:20])


class CryptoError(NearbytesError):
    """Base exception for cryptographic failures."""

    def __init__(self, message: str, cause: Exception | None = None):
        details: dict = {}
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)
        self.cause = cause


class KeyDerivationError(CryptoError):
    """Raised when deriving a key pair or symmetric key fails."""


class EncryptionError(CryptoError):
    """Raised when symmetric encryption fails."""


class DecryptionError(CryptoError):
    """Raised when decryption fails: wrong key, tampered or truncated data."""


class SigningError(CryptoError):
    """Raised when producing a signature fails."""


class VerificationError(CryptoError):
    """Raised when an event fails verification.

    A single failing event invalidates the whole replay.
    """

    def __init__(
        self,
        message: str,
        event_hash: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        if event_hash:
            self.details["event_hash"] = event_hash
        self.event_hash = event_hash


class StorageError(NearbytesError):
    """Base exception for storage backend failures."""


class StorageIOError(StorageError):
    """Raised when a storage I/O operation fails."""

    def __init__(self, operation: str, path: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
        message = f"Storage I/O error during {operation}"
        if path:
            message += f": {path}"
        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.cause = cause


class BlockNotFoundError(StorageError):
    """Raised when an encrypted block is not present in the block store."""

    def __init__(self, block_hash: str):
        super().__init__(f"Block not found: {block_hash}", {"block_hash": block_hash})
        self.block_hash = block_hash


class EventNotFoundError(StorageError):
    """Raised when an event is not found in an identity's event log."""

    def __init__(self, event_hash: str, namespace: str | None = None):
        details = {"event_hash": event_hash}
        if namespace:
            details["namespace"] = namespace
        super().__init__(f"Event not found: {event_hash}", details)
        self.event_hash = event_hash
        self.namespace = namespace


class DecodeError(NearbytesError):
    """Raised when stored event bytes are malformed."""

    def __init__(self, reason: str, offset: int | None = None):
        details: dict = {"reason": reason}
        if offset is not None:
            details["offset"] = offset
        message = f"Malformed event bytes: {reason}"
        if offset is not None:
            message += f" (at offset {offset})"
        super().__init__(message, details)
        self.reason = reason
        self.offset = offset
