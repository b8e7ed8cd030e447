"""
OCSP validator — decide the revocation status of one certificate from one single response.

Checks run in a fixed order and short-circuit: the first failing check
appends exactly one report item and the validation stops there.

  self-signed → serial number → issuer hashes → freshness → expiry → status

Only a GOOD status (or a revocation that lies in the future relative to the
validation date) reaches responder verification, so the signature work is
done last.
"""

from __future__ import annotations

from datetime import datetime

import structlog

from ocsp_validator.dependencies import ValidatorDependencies
from ocsp_validator.domain.context import ValidationContext, ValidatorContext
from ocsp_validator.domain.failure import ErrorCode
from ocsp_validator.domain.models import (
    Certificate,
    CertificateStatus,
    CertStatus,
    OcspResponse,
    SingleResponse,
)
from ocsp_validator.domain.report import ReportItem, ReportItemStatus, ValidationReport
from ocsp_validator.domain.result import Failure, Result, Success
from ocsp_validator.responder import OCSP_CHECK, ResponderVerifier

log = structlog.get_logger()

SELF_SIGNED_CERTIFICATE = "Certificate is self-signed. Revocation data check will be skipped."

SERIAL_NUMBERS_DO_NOT_MATCH = "OCSP: Serial numbers don't match."

ISSUERS_DO_NOT_MATCH = "OCSP: Issuers don't match."

UNABLE_TO_CHECK_IF_ISSUERS_MATCH = "OCSP response could not be verified: unable to check if issuers match."

FRESHNESS_CHECK = (
    "OCSP response is not fresh enough: this update: {this_update}, "
    "validation date: {validation_date}, freshness: {freshness}."
)

OCSP_IS_NO_LONGER_VALID = "OCSP is no longer valid: {validation_date} after {next_update}"

CERT_IS_REVOKED = "Certificate status is revoked."

CERT_STATUS_IS_UNKNOWN = "Certificate status is unknown."

VALID_CERTIFICATE_IS_REVOKED = (
    "The certificate was valid on the verification date, but has been revoked since {revocation_time}."
)


class OcspValidator:
    """
    Validate a certificate against a single OCSP response.

    Holds only read-only collaborators; one instance may be shared across
    threads as long as every call gets its own report.
    """

    def __init__(self, dependencies: ValidatorDependencies) -> None:
        self._crypto = dependencies.crypto
        self._retriever = dependencies.retriever
        self._settings = dependencies.settings
        self._responder_verifier = ResponderVerifier(dependencies)

    def validate(
        self,
        report: ValidationReport,
        context: ValidationContext,
        certificate: Certificate,
        single_response: SingleResponse,
        ocsp_response: OcspResponse,
        validation_date: datetime,
    ) -> None:
        """
        Validate `certificate` against `single_response`, appending the outcome to `report`.

        Args:
            report: Report to append results to.
            context: Context of the caller; narrowed to the OCSP validator role.
            certificate: The certificate whose revocation status is checked.
            single_response: The single response expected to describe `certificate`.
            ocsp_response: The signed envelope containing `single_response`.
            validation_date: The instant the status is evaluated at. Must be
                timezone-aware; response times are compared in UTC.

        Raises:
            ValueError: If `validation_date` is naive.
        """
        if validation_date.utcoffset() is None:
            raise ValueError("validation_date must be timezone-aware")

        local_context = context.with_validator(ValidatorContext.OCSP_VALIDATOR)

        if certificate.is_self_signed:
            report.add_report_item(
                ReportItem(certificate, OCSP_CHECK, SELF_SIGNED_CERTIFICATE, ReportItemStatus.INFO)
            )
            return

        if certificate.serial_number != single_response.cert_id.serial_number:
            log.debug(
                "ocsp.serial_mismatch",
                expected=hex(certificate.serial_number),
                found=hex(single_response.cert_id.serial_number),
            )
            report.add_report_item(
                ReportItem(certificate, OCSP_CHECK, SERIAL_NUMBERS_DO_NOT_MATCH, ReportItemStatus.INDETERMINATE)
            )
            return

        issuer_check = self._resolve_matching_issuer(certificate, single_response)
        match issuer_check:
            case Failure(error):
                log.info("ocsp.issuer_unverifiable", subject=certificate.subject, error=error.message)
                report.add_report_item(
                    ReportItem(
                        certificate,
                        OCSP_CHECK,
                        UNABLE_TO_CHECK_IF_ISSUERS_MATCH,
                        ReportItemStatus.INDETERMINATE,
                        cause=error.exception,
                    )
                )
                return
            case Success(None):
                log.info("ocsp.issuer_mismatch", subject=certificate.subject, issuer=certificate.issuer)
                report.add_report_item(
                    ReportItem(certificate, OCSP_CHECK, ISSUERS_DO_NOT_MATCH, ReportItemStatus.INDETERMINATE)
                )
                return
        issuer = issuer_check.value()

        freshness = self._settings.freshness_for(local_context)
        if single_response.this_update < validation_date - freshness:
            log.info(
                "ocsp.not_fresh",
                this_update=single_response.this_update.isoformat(),
                validation_date=validation_date.isoformat(),
                freshness=str(freshness),
            )
            message = FRESHNESS_CHECK.format(
                this_update=single_response.this_update,
                validation_date=validation_date,
                freshness=freshness,
            )
            report.add_report_item(
                ReportItem(certificate, OCSP_CHECK, message, ReportItemStatus.INDETERMINATE)
            )
            return

        # No nextUpdate: the responder has newer information available at all times.
        next_update = single_response.next_update
        if next_update is not None and validation_date > next_update:
            log.info(
                "ocsp.expired",
                validation_date=validation_date.isoformat(),
                next_update=next_update.isoformat(),
            )
            message = OCSP_IS_NO_LONGER_VALID.format(validation_date=validation_date, next_update=next_update)
            report.add_report_item(
                ReportItem(certificate, OCSP_CHECK, message, ReportItemStatus.INDETERMINATE)
            )
            return

        status = self._classify(single_response)
        match status:
            case CertificateStatus(status=CertStatus.GOOD):
                self._responder_verifier.verify(report, local_context, ocsp_response, issuer)
            case CertificateStatus(status=CertStatus.REVOKED, revocation_time=revoked_at) if (
                revoked_at is not None and validation_date < revoked_at
            ):
                self._responder_verifier.verify(report, local_context, ocsp_response, issuer)
                report.add_report_item(
                    ReportItem(
                        certificate,
                        OCSP_CHECK,
                        VALID_CERTIFICATE_IS_REVOKED.format(revocation_time=revoked_at),
                        ReportItemStatus.INFO,
                    )
                )
            case CertificateStatus(status=CertStatus.REVOKED):
                log.info("ocsp.revoked", subject=certificate.subject, serial=hex(certificate.serial_number))
                report.add_report_item(
                    ReportItem(certificate, OCSP_CHECK, CERT_IS_REVOKED, ReportItemStatus.INVALID)
                )
            case _:
                report.add_report_item(
                    ReportItem(certificate, OCSP_CHECK, CERT_STATUS_IS_UNKNOWN, ReportItemStatus.INDETERMINATE)
                )

    def _resolve_matching_issuer(
        self, certificate: Certificate, single_response: SingleResponse
    ) -> Result[Certificate | None]:
        """
        Resolve the issuer of `certificate` and check it against the response's CertID.

        Success(issuer) when the hashes match, Success(None) on an explicit
        mismatch, Failure when the issuer is unknown or hashing failed.
        """
        cert_id = single_response.cert_id
        return (
            Result.from_computation(
                lambda: self._retriever.resolve_issuer(certificate),
                ErrorCode.LOOKUP_ERROR,
                "Issuer lookup failed",
            )
            .flat_map(lambda issuer: Result.from_optional(issuer, f"Issuer of {certificate.subject} not found"))
            .flat_map(
                lambda issuer: Result.from_result_computation(
                    lambda: self._crypto.hashes_match(cert_id, issuer),
                    ErrorCode.HASH_ERROR,
                    "Issuer hash comparison failed",
                ).map(lambda matches: issuer if matches else None)
            )
        )

    def _classify(self, single_response: SingleResponse) -> CertificateStatus:
        """Classify the response status; a classifier failure counts as UNKNOWN."""
        classification = Result.from_result_computation(
            lambda: self._crypto.classify_status(single_response.status),
            ErrorCode.STATUS_ERROR,
            "Status classification failed",
        )
        match classification:
            case Success(status):
                return status
            case Failure(error):
                log.warning("ocsp.status_unclassified", error=error.message)
        return CertificateStatus.unknown()
