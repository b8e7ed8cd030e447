"""
Responder verification — is the signer of an OCSP response entitled to sign it?

Three tiers, cheapest first:

  1. The issuing CA's own key validates the response signature.
  2. Otherwise a responder certificate is resolved (embedded in the response
     or configured as trusted for OCSP). If it is not already trusted it must
     be signed directly by the issuing CA (RFC 6960 section 4.2.2.2).
  3. The responder certificate is chain-validated at the response's
     producedAt time; that sub-report is folded into the caller's report
     with INVALID items downgraded to INDETERMINATE.
"""

from __future__ import annotations

import structlog

from ocsp_validator.dependencies import ValidatorDependencies
from ocsp_validator.domain.context import CertificateSource, ValidationContext
from ocsp_validator.domain.failure import ErrorCode
from ocsp_validator.domain.models import Certificate, OcspResponse
from ocsp_validator.domain.report import (
    ReportItem,
    ReportItemStatus,
    ValidationReport,
    fold_responder_report,
)
from ocsp_validator.domain.result import Failure, Result, Success

log = structlog.get_logger()

OCSP_CHECK = "OCSP response check."

INVALID_OCSP = "OCSP response is invalid."

OCSP_COULD_NOT_BE_VERIFIED = (
    "OCSP response could not be verified: it does not contain responder in the certificate chain "
    "and response is not signed by issuer certificate or any from the trusted store."
)


class ResponderVerifier:
    """Establish trust in the entity that signed an OCSP response."""

    def __init__(self, dependencies: ValidatorDependencies) -> None:
        self._crypto = dependencies.crypto
        self._retriever = dependencies.retriever
        self._chain_validator = dependencies.chain_validator

    def verify(
        self,
        report: ValidationReport,
        context: ValidationContext,
        ocsp_response: OcspResponse,
        issuer: Certificate,
    ) -> None:
        local_context = context.with_certificate_source(CertificateSource.OCSP_ISSUER)
        trusted_context = local_context.with_certificate_source(CertificateSource.TRUSTED)

        if self._signed_by(ocsp_response, issuer):
            log.debug("ocsp.responder_is_issuer", issuer=issuer.subject)
            self._validate_responder(report, trusted_context, issuer, ocsp_response)
            return

        lookup = self._resolve_responder(ocsp_response)
        match lookup:
            case Failure(error):
                log.warning("ocsp.responder_lookup_failed", issuer=issuer.subject, error=error.message)
                self._could_not_verify(report, issuer, cause=error.exception)
                return
            case Success(None):
                log.info("ocsp.responder_not_found", issuer=issuer.subject)
                self._could_not_verify(report, issuer)
                return
        responder = lookup.value()

        match self._is_trusted(responder):
            case Failure(error):
                log.warning("ocsp.responder_trust_check_failed", responder=responder.subject, error=error.message)
                self._could_not_verify(report, issuer, cause=error.exception)
                return
            case Success(True):
                log.debug("ocsp.responder_trusted", responder=responder.subject)
                self._validate_responder(report, trusted_context, responder, ocsp_response)
                return

        match self._check_delegation(responder, issuer):
            case Failure(error):
                log.warning(
                    "ocsp.responder_not_issued_by_ca",
                    responder=responder.subject,
                    issuer=issuer.subject,
                    error=error.message,
                )
                report.add_report_item(
                    ReportItem(responder, OCSP_CHECK, INVALID_OCSP, ReportItemStatus.INVALID,
                               cause=error.as_exception())
                )
                return
            case Success(_):
                log.debug("ocsp.responder_delegated", responder=responder.subject, issuer=issuer.subject)

        self._validate_responder(report, local_context, responder, ocsp_response)

    def _resolve_responder(self, ocsp_response: OcspResponse) -> Result[Certificate | None]:
        return Result.from_computation(
            lambda: self._retriever.resolve_responder_certificate(ocsp_response),
            ErrorCode.LOOKUP_ERROR,
            "Responder certificate lookup failed",
        )

    def _is_trusted(self, responder: Certificate) -> Result[bool]:
        return Result.from_computation(
            lambda: self._retriever.is_trusted(responder) or self._retriever.is_trusted_for_ocsp(responder),
            ErrorCode.LOOKUP_ERROR,
            "Responder trust check failed",
        )

    @staticmethod
    def _could_not_verify(
        report: ValidationReport, issuer: Certificate, cause: BaseException | None = None
    ) -> None:
        report.add_report_item(
            ReportItem(issuer, OCSP_CHECK, OCSP_COULD_NOT_BE_VERIFIED, ReportItemStatus.INDETERMINATE, cause=cause)
        )

    def _signed_by(self, ocsp_response: OcspResponse, signer: Certificate) -> bool:
        verification = Result.from_result_computation(
            lambda: self._crypto.verify_response_signature(ocsp_response, signer),
            ErrorCode.SIGNATURE_ERROR,
            "OCSP response signature check failed",
        )
        return verification.is_success()

    def _check_delegation(self, responder: Certificate, issuer: Certificate) -> Result[Certificate]:
        return Result.from_result_computation(
            lambda: self._crypto.verify_certificate_signature(responder, issuer),
            ErrorCode.SIGNATURE_ERROR,
            f"Responder certificate is not signed by {issuer.subject}",
        )

    def _validate_responder(
        self,
        report: ValidationReport,
        context: ValidationContext,
        responder: Certificate,
        ocsp_response: OcspResponse,
    ) -> None:
        responder_report = ValidationReport()
        self._chain_validator.validate(responder_report, context, responder, ocsp_response.produced_at)
        log.debug(
            "ocsp.responder_chain_validated",
            responder=responder.subject,
            result=responder_report.validation_result.value,
            items=len(responder_report),
        )
        fold_responder_report(report, responder_report)
