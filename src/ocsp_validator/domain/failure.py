"""
Failure description — structured error information for the failure track.

Cryptographic provider and certificate lookup operations never raise into
the validation engine. They return a Failure carrying one of these codes,
a human-readable message and, when one was raised, the original exception.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique


@unique
class ErrorCode(Enum):
    """Error codes produced by the cryptographic provider and lookup adapters."""

    DECODING_ERROR = "DECODING_ERROR"
    """DER/ASN.1 input could not be decoded."""

    SIGNATURE_ERROR = "SIGNATURE_ERROR"
    """A signature did not verify against the candidate public key."""

    HASH_ERROR = "HASH_ERROR"
    """Issuer name or key hashes could not be computed."""

    STATUS_ERROR = "STATUS_ERROR"
    """A certificate status object could not be classified."""

    LOOKUP_ERROR = "LOOKUP_ERROR"
    """An issuer or responder certificate could not be resolved."""

    UNSUPPORTED_ALGORITHM = "UNSUPPORTED_ALGORITHM"
    """The key or hash algorithm is not supported by the provider."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message and optional exception.

    >>> desc = FailureDescription(ErrorCode.SIGNATURE_ERROR, "Signature mismatch")
    >>> desc.code
    <ErrorCode.SIGNATURE_ERROR: 'SIGNATURE_ERROR'>
    """

    code: ErrorCode
    message: str
    exception: BaseException | None = field(default=None, repr=False)

    def as_exception(self) -> BaseException:
        """Return the original exception, or a RuntimeError built from the message."""
        if self.exception is not None:
            return self.exception
        return RuntimeError(f"{self.code.value}: {self.message}")
