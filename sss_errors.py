"""
Error kinds raised by the secret sharing core.

Every error derives from SecretSharingError, itself a ValueError, and may carry
the position it refers to: ``unit_index`` for a byte/pixel and ``line`` for a
line of persisted share text.
"""


class SecretSharingError(ValueError):
    def __init__(self, message, unit_index=None, line=None):
        super().__init__(message)
        self.unit_index = unit_index
        self.line = line


class InvalidSchemeError(SecretSharingError):
    """Threshold/share count combination cannot form a scheme."""


class InvalidSecretError(SecretSharingError):
    """Secret value lies outside the field [0, prime)."""


class InsufficientSharesError(SecretSharingError):
    """Fewer shares than the threshold were supplied."""


class NoInverseError(SecretSharingError):
    """Modular inverse is undefined, usually duplicate x coordinates."""


class ParseError(SecretSharingError):
    """Persisted share text is malformed."""


class DimensionMismatchError(SecretSharingError):
    """Pixel count differs from width * height."""


class CorruptShareError(SecretSharingError):
    """Reconstructed values cannot be interpreted as bytes, text or pixels."""


class OperationCancelledError(SecretSharingError):
    """A long running byte-wise operation was cancelled by its caller."""
