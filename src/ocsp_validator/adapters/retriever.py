"""
In-memory certificate retriever — issuer and responder lookup over known certificates.

Adapter layer — implements the CertificateRetriever port over three
collections supplied by the caller:

  known     certificates usable to build chains (intermediates, CAs)
  trusted   trust anchors, trusted for every purpose
  ocsp      certificates trusted specifically as OCSP responders

Lookups that need a signature check delegate to the injected CryptoProvider.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from ocsp_validator.domain.models import Certificate, OcspResponse
from ocsp_validator.domain.ports import CryptoProvider

log = structlog.get_logger()


def _unique(certificates: Iterable[Certificate]) -> dict[bytes, Certificate]:
    return {certificate.der: certificate for certificate in certificates}


class InMemoryCertificateRetriever:
    """Implements the CertificateRetriever port over in-memory certificate collections."""

    def __init__(
        self,
        crypto: CryptoProvider,
        known_certificates: Iterable[Certificate] = (),
        trusted_certificates: Iterable[Certificate] = (),
        ocsp_trusted_certificates: Iterable[Certificate] = (),
    ) -> None:
        self._crypto = crypto
        self._trusted = _unique(trusted_certificates)
        self._ocsp_trusted = _unique(ocsp_trusted_certificates)
        self._known = _unique(known_certificates) | self._trusted | self._ocsp_trusted

    def resolve_issuer(self, certificate: Certificate) -> Certificate | None:
        """
        Find the certificate that issued `certificate`.

        Candidates are selected by subject DN, narrowed by key identifier when
        the certificate carries an AKI, and confirmed by signature.
        """
        candidates = [c for c in self._known.values() if c.subject == certificate.issuer]
        if certificate.authority_key_identifier is not None:
            by_key_id = [
                c for c in candidates if c.subject_key_identifier == certificate.authority_key_identifier
            ]
            candidates = by_key_id or candidates

        for candidate in candidates:
            if self._crypto.verify_certificate_signature(certificate, candidate).is_success():
                return candidate

        log.debug("retriever.issuer_not_found", subject=certificate.subject, issuer=certificate.issuer)
        return None

    def resolve_responder_certificate(self, response: OcspResponse) -> Certificate | None:
        """
        Find the certificate whose key signed `response`.

        Certificates embedded in the response are tried first, then the
        certificates trusted for OCSP. Only candidates identified by the
        response's ResponderID are checked against the signature.
        """
        for candidate in (*response.certificates, *self._ocsp_trusted.values()):
            if not self._crypto.matches_responder_id(response, candidate).get_or_else(False):
                continue
            if self._crypto.verify_response_signature(response, candidate).is_success():
                log.debug("retriever.responder_found", responder=candidate.subject)
                return candidate
        return None

    def is_trusted(self, certificate: Certificate) -> bool:
        return certificate.der in self._trusted

    def is_trusted_for_ocsp(self, certificate: Certificate) -> bool:
        return certificate.der in self._ocsp_trusted
