"""
Ports — Protocol-based interfaces for the engine's external collaborators.

These define WHAT the OCSP engine needs without specifying HOW it is done:

  Domain ← Ports (protocols) ← Adapters (implementations)

Each port is a Protocol (structural typing) so adapters satisfy the
contract simply by implementing the methods — no inheritance. The chain
validator port is what lets the general chain validator and the OCSP
engine call each other recursively without a circular import: the engine
depends on this Protocol, and the chain validator depends on the engine.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from ocsp_validator.domain.context import ValidationContext
from ocsp_validator.domain.models import (
    Certificate,
    CertificateId,
    CertificateStatus,
    OcspResponse,
)
from ocsp_validator.domain.report import ValidationReport
from ocsp_validator.domain.result import Result


@runtime_checkable
class CryptoProvider(Protocol):
    """
    Port: signature verification, issuer hash comparison and status classification.

    Every operation returns a Result. Implementations should not raise, but
    the engine still guards the calls where a raise would abort a validation.
    """

    def verify_response_signature(
        self, response: OcspResponse, signer: Certificate
    ) -> Result[Certificate]:
        """Success(signer) if `signer`'s public key validates the response signature."""
        ...

    def verify_certificate_signature(
        self, certificate: Certificate, issuer: Certificate
    ) -> Result[Certificate]:
        """Success(certificate) if `certificate` was signed directly by `issuer`."""
        ...

    def hashes_match(self, cert_id: CertificateId, issuer: Certificate) -> Result[bool]:
        """Whether the CertID's issuer name and key hashes identify `issuer`."""
        ...

    def matches_responder_id(self, response: OcspResponse, candidate: Certificate) -> Result[bool]:
        """Whether the response's ResponderID (name or key hash) identifies `candidate`."""
        ...

    def classify_status(self, status: object) -> Result[CertificateStatus]:
        """Classify a raw single-response status as GOOD, REVOKED or UNKNOWN."""
        ...


@runtime_checkable
class CertificateRetriever(Protocol):
    """
    Port: resolve issuer and responder certificates and answer trust questions.

    Returns None when nothing suitable is known.
    """

    def resolve_issuer(self, certificate: Certificate) -> Certificate | None: ...

    def resolve_responder_certificate(self, response: OcspResponse) -> Certificate | None: ...

    def is_trusted(self, certificate: Certificate) -> bool: ...

    def is_trusted_for_ocsp(self, certificate: Certificate) -> bool: ...


@runtime_checkable
class CertificateChainValidator(Protocol):
    """
    Port: validate an arbitrary certificate up to a trust anchor.

    Re-entrant: implementations may call back into the OCSP engine for other
    certificates of the chain. Results are appended to `report` in place.
    """

    def validate(
        self,
        report: ValidationReport,
        context: ValidationContext,
        certificate: Certificate,
        validation_date: datetime,
    ) -> None: ...
