"""
Validation context — the immutable identity token threaded through a validation.

Each nested call derives a narrower context (which validator is running,
where the certificate under test came from, whether the validation is
about the present or a historical instant) without mutating its parent.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class ValidatorContext(Enum):
    """The validator currently performing the check."""

    OCSP_VALIDATOR = "OCSP_VALIDATOR"
    CRL_VALIDATOR = "CRL_VALIDATOR"
    REVOCATION_DATA_VALIDATOR = "REVOCATION_DATA_VALIDATOR"
    CERTIFICATE_CHAIN_VALIDATOR = "CERTIFICATE_CHAIN_VALIDATOR"
    SIGNATURE_VALIDATOR = "SIGNATURE_VALIDATOR"


class CertificateSource(Enum):
    """Where the certificate under validation was obtained from."""

    SIGNER_CERT = "SIGNER_CERT"
    CERT_ISSUER = "CERT_ISSUER"
    OCSP_ISSUER = "OCSP_ISSUER"
    CRL_ISSUER = "CRL_ISSUER"
    TIMESTAMP = "TIMESTAMP"
    TRUSTED = "TRUSTED"


class TimeBasedContext(Enum):
    """Whether the validation instant is the present or a point in the past."""

    HISTORICAL = "HISTORICAL"
    PRESENT = "PRESENT"


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """
    Layered, immutable validation context.

    >>> ctx = ValidationContext(ValidatorContext.SIGNATURE_VALIDATOR, CertificateSource.SIGNER_CERT)
    >>> ctx.with_validator(ValidatorContext.OCSP_VALIDATOR).validator
    <ValidatorContext.OCSP_VALIDATOR: 'OCSP_VALIDATOR'>
    >>> ctx.validator
    <ValidatorContext.SIGNATURE_VALIDATOR: 'SIGNATURE_VALIDATOR'>
    """

    validator: ValidatorContext
    certificate_source: CertificateSource
    time_based: TimeBasedContext = TimeBasedContext.PRESENT

    def with_validator(self, validator: ValidatorContext) -> ValidationContext:
        return replace(self, validator=validator)

    def with_certificate_source(self, source: CertificateSource) -> ValidationContext:
        return replace(self, certificate_source=source)

    def with_time_based(self, time_based: TimeBasedContext) -> ValidationContext:
        return replace(self, time_based=time_based)
