"""
Test PKI helpers built with cryptography's certificate and OCSP builders.

issue_certificate() creates CA, leaf and responder certificates;
build_ocsp_response() produces signed DER OCSP responses about them.
Keys are P-256 so generation stays fast; RSA keys are issued on request
and resign_with_pss() re-signs a response with RSASSA-PSS.

Timestamps are truncated to whole seconds because OCSP encodes them as
GeneralizedTime without fractions.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from asn1crypto import algos
from asn1crypto import ocsp as asn1_ocsp
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.x509 import ocsp
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from ocsp_validator.adapters.crypto_provider import certificate_from_x509
from ocsp_validator.domain.models import Certificate

NOW = datetime.now(UTC).replace(microsecond=0)


@dataclass(frozen=True)
class IssuedCertificate:
    """A generated certificate together with its private key."""

    cert: x509.Certificate
    key: ec.EllipticCurvePrivateKey | rsa.RSAPrivateKey

    @property
    def domain(self) -> Certificate:
        return certificate_from_x509(self.cert)


def _name(common_name: str) -> x509.Name:
    return x509.Name([
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "OCSP Validator Tests"),
    ])


def issue_certificate(
    common_name: str,
    issuer: IssuedCertificate | None = None,
    *,
    ca: bool = False,
    ocsp_signing: bool = False,
    serial_number: int | None = None,
    rsa_key: bool = False,
) -> IssuedCertificate:
    """
    Issue a certificate signed by `issuer`, or a self-signed one when issuer is None.

    Carries SKI always and AKI when issued by another certificate.
    """
    key = (
        rsa.generate_private_key(public_exponent=65537, key_size=2048)
        if rsa_key
        else ec.generate_private_key(ec.SECP256R1())
    )
    signing_key = issuer.key if issuer is not None else key
    issuer_name = issuer.cert.subject if issuer is not None else _name(common_name)

    builder = (
        x509.CertificateBuilder()
        .subject_name(_name(common_name))
        .issuer_name(issuer_name)
        .public_key(key.public_key())
        .serial_number(serial_number if serial_number is not None else x509.random_serial_number())
        .not_valid_before(NOW - timedelta(days=30))
        .not_valid_after(NOW + timedelta(days=365))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
    )
    if issuer is not None:
        builder = builder.add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer.key.public_key()),
            critical=False,
        )
    if ocsp_signing:
        builder = builder.add_extension(
            x509.ExtendedKeyUsage([ExtendedKeyUsageOID.OCSP_SIGNING]),
            critical=False,
        )
    return IssuedCertificate(cert=builder.sign(signing_key, hashes.SHA256()), key=key)


def build_ocsp_response(
    subject: IssuedCertificate,
    issuer: IssuedCertificate,
    signer: IssuedCertificate,
    *,
    cert_status: ocsp.OCSPCertStatus = ocsp.OCSPCertStatus.GOOD,
    this_update: datetime = NOW,
    next_update: datetime | None = None,
    revocation_time: datetime | None = None,
    embedded: list[IssuedCertificate] | None = None,
    algorithm: hashes.HashAlgorithm | None = None,
    responder_encoding: ocsp.OCSPResponderEncoding = ocsp.OCSPResponderEncoding.HASH,
) -> bytes:
    """Build a DER OCSPResponse about `subject`, issued by `issuer`, signed by `signer`."""
    builder = ocsp.OCSPResponseBuilder().add_response(
        cert=subject.cert,
        issuer=issuer.cert,
        algorithm=algorithm if algorithm is not None else hashes.SHA1(),
        cert_status=cert_status,
        this_update=this_update,
        next_update=next_update,
        revocation_time=revocation_time,
        revocation_reason=None,
    )
    builder = builder.responder_id(responder_encoding, signer.cert)
    if embedded:
        builder = builder.certificates([issued.cert for issued in embedded])
    response = builder.sign(signer.key, hashes.SHA256())
    return response.public_bytes(serialization.Encoding.DER)


def resign_with_pss(der: bytes, signer: IssuedCertificate, salt_length: int = 32) -> bytes:
    """
    Replace the signature of a DER OCSPResponse with an RSASSA-PSS one (SHA-256, MGF1-SHA-256).

    OCSPResponseBuilder only signs with PKCS#1 v1.5, so the BasicOCSPResponse
    is rebuilt around the original tbsResponseData.
    """
    assert isinstance(signer.key, rsa.RSAPrivateKey)
    basic = asn1_ocsp.OCSPResponse.load(der).basic_ocsp_response
    tbs = basic["tbs_response_data"]
    signature = signer.key.sign(
        tbs.dump(),
        padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=salt_length),
        hashes.SHA256(),
    )
    resigned = asn1_ocsp.BasicOCSPResponse({
        "tbs_response_data": tbs,
        "signature_algorithm": algos.SignedDigestAlgorithm({
            "algorithm": "rsassa_pss",
            "parameters": algos.RSASSAPSSParams({
                "hash_algorithm": {"algorithm": "sha256"},
                "mask_gen_algorithm": {"algorithm": "mgf1", "parameters": {"algorithm": "sha256"}},
                "salt_length": salt_length,
            }),
        }),
        "signature": signature,
    })
    return asn1_ocsp.OCSPResponse({
        "response_status": "successful",
        "response_bytes": {"response_type": "basic_ocsp_response", "response": resigned},
    }).dump()
