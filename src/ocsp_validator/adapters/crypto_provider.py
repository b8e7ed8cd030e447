"""
Cryptographic provider adapter — signatures, CertID hashes and status classification.

Adapter layer — implements the CryptoProvider port using:
  - cryptography (PyCA): OCSP response decoding, X.509 loading, signature checks
  - asn1crypto: extraction of the raw subjectPublicKey bits hashed into CertIDs

Also translates decoded cryptography objects into domain models:

  DER OCSPResponse
    → cryptography: ocsp.load_der_ocsp_response()
    → OcspResponse(SingleResponse..., Certificate...)   (domain models)

Every public operation returns a Result. Exceptions raised by the primitives
are caught here via Result.from_computation() and never reach the engine.
"""

from __future__ import annotations

from functools import lru_cache

import structlog
from asn1crypto import keys
from asn1crypto import ocsp as asn1_ocsp
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, padding, rsa
from cryptography.x509 import ocsp
from cryptography.x509.extensions import ExtensionNotFound

from ocsp_validator.domain.failure import ErrorCode
from ocsp_validator.domain.models import (
    Certificate,
    CertificateId,
    CertificateStatus,
    OcspResponse,
    SingleResponse,
)
from ocsp_validator.domain.result import Result

log = structlog.get_logger()

_HASH_ALGORITHMS: dict[str, type[hashes.HashAlgorithm]] = {
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}


# ─────────────────────── Loading (cached) ───────────────────────


@lru_cache(maxsize=256)
def _load_certificate(der: bytes) -> x509.Certificate:
    return x509.load_der_x509_certificate(der)


@lru_cache(maxsize=64)
def _load_ocsp_response(der: bytes) -> ocsp.OCSPResponse:
    return ocsp.load_der_ocsp_response(der)


# ─────────────────────── X.509 Metadata Extraction ───────────────────────


def _extract_ski(cert: x509.Certificate) -> str | None:
    """Extract Subject Key Identifier extension as hex string, or None if absent."""
    try:
        ext = cert.extensions.get_extension_for_class(x509.SubjectKeyIdentifier)
        return ext.value.digest.hex()
    except (ExtensionNotFound, ValueError):
        return None


def _extract_aki(cert: x509.Certificate) -> str | None:
    """Extract Authority Key Identifier extension as hex string, or None if absent."""
    try:
        ext = cert.extensions.get_extension_for_class(x509.AuthorityKeyIdentifier)
        if ext.value.key_identifier is not None:
            return ext.value.key_identifier.hex()
        return None
    except (ExtensionNotFound, ValueError):
        return None


def certificate_from_x509(cert: x509.Certificate) -> Certificate:
    """Convert a cryptography certificate into the domain Certificate."""
    return Certificate(
        der=cert.public_bytes(serialization.Encoding.DER),
        serial_number=cert.serial_number,
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        subject_key_identifier=_extract_ski(cert),
        authority_key_identifier=_extract_aki(cert),
    )


def certificate_from_der(der: bytes) -> Result[Certificate]:
    return Result.from_computation(
        lambda: certificate_from_x509(_load_certificate(der)),
        ErrorCode.DECODING_ERROR,
        "Failed to decode X.509 certificate",
    )


# ─────────────────────── OCSP Response Decoding ───────────────────────


def _single_response(single: ocsp.OCSPSingleResponse) -> SingleResponse:
    return SingleResponse(
        cert_id=CertificateId(
            serial_number=single.serial_number,
            issuer_name_hash=single.issuer_name_hash,
            issuer_key_hash=single.issuer_key_hash,
            hash_algorithm=single.hash_algorithm.name,
        ),
        status=single,
        this_update=single.this_update_utc,
        next_update=single.next_update_utc,
    )


def _do_load(der: bytes) -> OcspResponse:
    response = _load_ocsp_response(der)
    if response.response_status != ocsp.OCSPResponseStatus.SUCCESSFUL:
        raise ValueError(f"OCSP response status is {response.response_status.name}")

    responder_name = response.responder_name
    ocsp_response = OcspResponse(
        der=der,
        produced_at=response.produced_at_utc,
        responses=tuple(_single_response(single) for single in response.responses),
        certificates=tuple(certificate_from_x509(cert) for cert in response.certificates),
        responder_name=responder_name.rfc4514_string() if responder_name is not None else None,
        responder_key_hash=response.responder_key_hash,
    )
    log.debug(
        "ocsp.response_loaded",
        produced_at=ocsp_response.produced_at.isoformat(),
        responses=len(ocsp_response.responses),
        certificates=len(ocsp_response.certificates),
    )
    return ocsp_response


def load_ocsp_response(der: bytes) -> Result[OcspResponse]:
    """
    Decode a DER OCSPResponse into the domain OcspResponse.

    Returns Result.failure(DECODING_ERROR, ...) for malformed input and for
    responses whose status is not SUCCESSFUL (they carry no BasicOCSPResponse).
    """
    return Result.from_computation(
        lambda: _do_load(der),
        ErrorCode.DECODING_ERROR,
        "Failed to decode OCSP response",
    )


# ─────────────────────── Primitives ───────────────────────


def _verify_signature(
    public_key: object,
    signature: bytes,
    data: bytes,
    hash_algorithm: hashes.HashAlgorithm | None,
    rsa_padding: padding.AsymmetricPadding | None = None,
) -> None:
    """Raise InvalidSignature (or TypeError for unsupported keys) unless the signature verifies."""
    if isinstance(public_key, rsa.RSAPublicKey):
        if hash_algorithm is None:
            raise TypeError("RSA signature without a hash algorithm")
        public_key.verify(signature, data, rsa_padding or padding.PKCS1v15(), hash_algorithm)
    elif isinstance(public_key, ec.EllipticCurvePublicKey):
        if hash_algorithm is None:
            raise TypeError("ECDSA signature without a hash algorithm")
        public_key.verify(signature, data, ec.ECDSA(hash_algorithm))
    elif isinstance(public_key, (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)):
        public_key.verify(signature, data)
    else:
        raise TypeError(f"Unsupported public key type: {type(public_key).__name__}")


def _hash_algorithm(name: str) -> hashes.HashAlgorithm:
    algorithm_class = _HASH_ALGORITHMS.get(name.lower())
    if algorithm_class is None:
        raise ValueError(f"Unsupported hash algorithm: {name}")
    return algorithm_class()


def _rsa_signature_scheme(
    der: bytes, decoded: ocsp.OCSPResponse
) -> tuple[hashes.HashAlgorithm | None, padding.AsymmetricPadding]:
    """
    Hash algorithm and padding of an RSA response signature.

    cryptography does not expose the RSASSA-PSS parameters of an OCSP
    response, so they are read from the AlgorithmIdentifier with asn1crypto.
    """
    algorithm = asn1_ocsp.OCSPResponse.load(der).basic_ocsp_response["signature_algorithm"]
    if algorithm.signature_algo != "rsassa_pss":
        return decoded.signature_hash_algorithm, padding.PKCS1v15()

    params = algorithm["parameters"]
    mgf_hash = params["mask_gen_algorithm"]["parameters"]["algorithm"].native
    return _hash_algorithm(algorithm.hash_algo), padding.PSS(
        mgf=padding.MGF1(_hash_algorithm(mgf_hash)),
        salt_length=params["salt_length"].native,
    )


def _public_key_bits(cert: x509.Certificate) -> bytes:
    """The subjectPublicKey BIT STRING value, as hashed into CertID.issuerKeyHash."""
    spki = cert.public_key().public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return bytes(keys.PublicKeyInfo.load(spki)["public_key"])


def _digest(algorithm: hashes.HashAlgorithm, data: bytes) -> bytes:
    digest = hashes.Hash(algorithm)
    digest.update(data)
    return digest.finalize()


# ─────────────────────── Public Provider Class ───────────────────────


class CryptographyProvider:
    """
    Implements the CryptoProvider port on top of pyca/cryptography.

    Stateless apart from the module-level parse caches; safe to share
    between threads.
    """

    def verify_response_signature(
        self, response: OcspResponse, signer: Certificate
    ) -> Result[Certificate]:
        """Success(signer) if `signer`'s key validates the signature over tbsResponseData."""

        def _verify() -> Certificate:
            decoded = _load_ocsp_response(response.der)
            public_key = _load_certificate(signer.der).public_key()
            if isinstance(public_key, rsa.RSAPublicKey):
                hash_algorithm, rsa_padding = _rsa_signature_scheme(response.der, decoded)
            else:
                hash_algorithm, rsa_padding = decoded.signature_hash_algorithm, None
            _verify_signature(
                public_key,
                decoded.signature,
                decoded.tbs_response_bytes,
                hash_algorithm,
                rsa_padding,
            )
            return signer

        return Result.from_computation(
            _verify,
            ErrorCode.SIGNATURE_ERROR,
            f"OCSP response is not signed by {signer.subject}",
        )

    def verify_certificate_signature(
        self, certificate: Certificate, issuer: Certificate
    ) -> Result[Certificate]:
        """Success(certificate) if `issuer` issued `certificate` directly (name and signature)."""

        def _verify() -> Certificate:
            _load_certificate(certificate.der).verify_directly_issued_by(_load_certificate(issuer.der))
            return certificate

        return Result.from_computation(
            _verify,
            ErrorCode.SIGNATURE_ERROR,
            f"{certificate.subject} is not issued by {issuer.subject}",
        )

    def hashes_match(self, cert_id: CertificateId, issuer: Certificate) -> Result[bool]:
        """Recompute issuerNameHash and issuerKeyHash for `issuer` and compare with the CertID."""
        algorithm_class = _HASH_ALGORITHMS.get(cert_id.hash_algorithm.lower())
        if algorithm_class is None:
            return Result.failure(
                ErrorCode.UNSUPPORTED_ALGORITHM,
                f"Unsupported CertID hash algorithm: {cert_id.hash_algorithm}",
            )

        def _compare() -> bool:
            issuer_cert = _load_certificate(issuer.der)
            name_hash = _digest(algorithm_class(), issuer_cert.subject.public_bytes())
            key_hash = _digest(algorithm_class(), _public_key_bits(issuer_cert))
            return name_hash == cert_id.issuer_name_hash and key_hash == cert_id.issuer_key_hash

        return Result.from_computation(
            _compare,
            ErrorCode.HASH_ERROR,
            f"Unable to hash issuer {issuer.subject}",
        )

    def matches_responder_id(self, response: OcspResponse, candidate: Certificate) -> Result[bool]:
        """
        Compare the ResponderID against `candidate`.

        byKey is the SHA-1 hash of the subjectPublicKey bits (RFC 6960 section 4.2.1);
        byName is compared with the candidate's subject DN.
        """

        def _compare() -> bool:
            if response.responder_key_hash is not None:
                key_bits = _public_key_bits(_load_certificate(candidate.der))
                return _digest(hashes.SHA1(), key_bits) == response.responder_key_hash
            return response.responder_name == candidate.subject

        return Result.from_computation(
            _compare,
            ErrorCode.HASH_ERROR,
            f"Unable to compare responder ID with {candidate.subject}",
        )

    def classify_status(self, status: object) -> Result[CertificateStatus]:
        """Classify an OCSPSingleResponse (or anything exposing certificate_status)."""
        cert_status = getattr(status, "certificate_status", None)
        match cert_status:
            case ocsp.OCSPCertStatus.GOOD:
                return Result.success(CertificateStatus.good())
            case ocsp.OCSPCertStatus.REVOKED:
                return Result.from_computation(
                    lambda: CertificateStatus.revoked(status.revocation_time_utc),  # type: ignore[attr-defined]
                    ErrorCode.STATUS_ERROR,
                    "Revoked status without a revocation time",
                )
            case ocsp.OCSPCertStatus.UNKNOWN:
                return Result.success(CertificateStatus.unknown())
        return Result.failure(
            ErrorCode.STATUS_ERROR,
            f"Cannot classify certificate status of type {type(status).__name__}",
        )
