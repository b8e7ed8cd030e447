"""
Composition root — wires the OCSP validator from its collaborators.

This is the place where the concrete cryptographic provider is chosen.
Everything else depends on the Protocol ports.

Responsibilities:
  1. Configure structlog for structured logging
  2. Load settings (or accept pre-built ones)
  3. Build the ValidatorDependencies shared by the evaluator and the resolver
"""

from __future__ import annotations

import logging

import structlog

from ocsp_validator.adapters.crypto_provider import CryptographyProvider
from ocsp_validator.config import AppSettings
from ocsp_validator.dependencies import ValidatorDependencies
from ocsp_validator.domain.ports import (
    CertificateChainValidator,
    CertificateRetriever,
    CryptoProvider,
)
from ocsp_validator.validator import OcspValidator


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for structured logging.

    Colored, human-readable console output with ISO timestamps; events below
    `log_level` are dropped. Unknown level names fall back to INFO.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def create_dependencies(
    retriever: CertificateRetriever,
    chain_validator: CertificateChainValidator,
    settings: AppSettings | None = None,
    crypto: CryptoProvider | None = None,
) -> ValidatorDependencies:
    """Bundle the collaborators; defaults to environment settings and the cryptography provider."""
    return ValidatorDependencies(
        crypto=crypto if crypto is not None else CryptographyProvider(),
        retriever=retriever,
        chain_validator=chain_validator,
        settings=settings if settings is not None else AppSettings(),
    )


def create_ocsp_validator(
    retriever: CertificateRetriever,
    chain_validator: CertificateChainValidator,
    settings: AppSettings | None = None,
    crypto: CryptoProvider | None = None,
) -> OcspValidator:
    """
    Build a ready-to-use OcspValidator and configure logging at the settings' log level.

    The returned validator holds no mutable state and can be shared by
    concurrent validations, each with its own report.
    """
    dependencies = create_dependencies(retriever, chain_validator, settings, crypto)
    configure_structlog(dependencies.settings.log_level)
    log = structlog.get_logger()
    log.debug(
        "ocsp.validator_created",
        crypto=type(dependencies.crypto).__name__,
        freshness=str(dependencies.settings.freshness.default),
    )
    return OcspValidator(dependencies)
