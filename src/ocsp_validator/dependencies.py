"""
Validator dependencies — the collaborators shared by the evaluator and the resolver.

Constructed once by the composition root and passed by reference; every
field is read-only, so one instance can serve concurrent validations.
"""

from __future__ import annotations

from dataclasses import dataclass

from ocsp_validator.config import AppSettings
from ocsp_validator.domain.ports import (
    CertificateChainValidator,
    CertificateRetriever,
    CryptoProvider,
)


@dataclass(frozen=True, slots=True)
class ValidatorDependencies:
    crypto: CryptoProvider
    retriever: CertificateRetriever
    chain_validator: CertificateChainValidator
    settings: AppSettings
