"""
Integration test fixtures — a recording chain validator and a wired OCSP validator.

The chain validator is the only fake: certificates, OCSP responses,
signatures and CertID hashes all go through pyca/cryptography.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

import pytest

from ocsp_validator.config import AppSettings
from ocsp_validator.domain.context import ValidationContext
from ocsp_validator.domain.models import Certificate
from ocsp_validator.domain.report import ReportItem, ReportItemStatus, ValidationReport


@dataclass(frozen=True, slots=True)
class ChainValidation:
    context: ValidationContext
    certificate: Certificate
    validation_date: datetime


@dataclass
class RecordingChainValidator:
    """Records every chain validation request and optionally reports a fixed status."""

    status: ReportItemStatus | None = None
    calls: list[ChainValidation] = field(default_factory=list)

    def validate(
        self,
        report: ValidationReport,
        context: ValidationContext,
        certificate: Certificate,
        validation_date: datetime,
    ) -> None:
        self.calls.append(ChainValidation(context, certificate, validation_date))
        if self.status is not None:
            report.add_report_item(
                ReportItem(certificate, "Certificate chain check.", "Chain result.", self.status)
            )


@pytest.fixture
def chain_validator() -> RecordingChainValidator:
    return RecordingChainValidator()


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None)
