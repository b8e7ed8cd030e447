"""
Domain models — immutable value objects for certificates and OCSP responses.

These are pure value objects with no behavior beyond a few derived
properties. They are built by the cryptographic adapter from decoded
objects and only ever read by the validation engine.

Certificates are matched by serial number and issuer linkage, never by
object identity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True, slots=True)
class Certificate:
    """
    An X.509 certificate as seen by the validation engine.

    The `der` field holds the raw DER encoding; the cryptographic provider
    re-loads it when signatures or keys are needed.
    """

    der: bytes = field(repr=False)
    serial_number: int
    subject: str
    issuer: str
    subject_key_identifier: str | None = None
    authority_key_identifier: str | None = None

    @property
    def is_self_signed(self) -> bool:
        return self.subject == self.issuer


@dataclass(frozen=True, slots=True)
class CertificateId:
    """
    The CertID of a single response (RFC 6960 section 4.1.1).

    issuer_name_hash and issuer_key_hash are computed with `hash_algorithm`
    (e.g. "sha1", "sha256") over the issuer's DN and public key bits.
    """

    serial_number: int
    issuer_name_hash: bytes
    issuer_key_hash: bytes
    hash_algorithm: str = "sha1"


class CertStatus(Enum):
    GOOD = "GOOD"
    REVOKED = "REVOKED"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class CertificateStatus:
    """Classified status of a single response; revocation_time is set only for REVOKED."""

    status: CertStatus
    revocation_time: datetime | None = None

    @staticmethod
    def good() -> CertificateStatus:
        return CertificateStatus(CertStatus.GOOD)

    @staticmethod
    def revoked(revocation_time: datetime) -> CertificateStatus:
        return CertificateStatus(CertStatus.REVOKED, revocation_time)

    @staticmethod
    def unknown() -> CertificateStatus:
        return CertificateStatus(CertStatus.UNKNOWN)


@dataclass(frozen=True, slots=True)
class SingleResponse:
    """
    One revocation statement extracted from an OCSP response.

    `status` is the provider's raw status object; only the cryptographic
    provider knows how to classify it. A `next_update` of None means the
    responder claims newer information is available at all times.
    """

    cert_id: CertificateId
    status: object = field(repr=False)
    this_update: datetime
    next_update: datetime | None = None


@dataclass(frozen=True, slots=True)
class OcspResponse:
    """
    A decoded, signed BasicOCSPResponse envelope.

    The `der` field holds the complete encoded OCSPResponse so the provider
    can check the signature. The responder is identified either by name or
    by the SHA-1 hash of its public key.
    """

    der: bytes = field(repr=False)
    produced_at: datetime
    responses: tuple[SingleResponse, ...] = ()
    certificates: tuple[Certificate, ...] = ()
    responder_name: str | None = None
    responder_key_hash: bytes | None = None

    def find_response(self, serial_number: int) -> SingleResponse | None:
        """Return the first single response whose CertID carries `serial_number`."""
        for single_response in self.responses:
            if single_response.cert_id.serial_number == serial_number:
                return single_response
        return None
