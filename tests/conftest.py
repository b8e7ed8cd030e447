"""
Shared test fixtures for the ocsp-validator test suite.

The PKI is generated once per session from the helpers in tests/pki.py:
a root CA, an intermediate CA, a leaf and two OCSP responder certificates.
"""

from __future__ import annotations

import pytest

from tests.pki import IssuedCertificate, issue_certificate

# ─────────────────────── PKI Fixtures ───────────────────────


@pytest.fixture(scope="session")
def root_ca() -> IssuedCertificate:
    return issue_certificate("Test Root CA", ca=True)


@pytest.fixture(scope="session")
def intermediate_ca(root_ca: IssuedCertificate) -> IssuedCertificate:
    return issue_certificate("Test Intermediate CA", root_ca, ca=True)


@pytest.fixture(scope="session")
def leaf(intermediate_ca: IssuedCertificate) -> IssuedCertificate:
    return issue_certificate("leaf.example.test", intermediate_ca)


@pytest.fixture(scope="session")
def delegated_responder(intermediate_ca: IssuedCertificate) -> IssuedCertificate:
    """An OCSP responder certificate issued directly by the intermediate CA."""
    return issue_certificate("Test OCSP Responder", intermediate_ca, ocsp_signing=True)


@pytest.fixture(scope="session")
def foreign_responder(root_ca: IssuedCertificate) -> IssuedCertificate:
    """An OCSP responder certificate issued by a different CA than the leaf's issuer."""
    return issue_certificate("Foreign OCSP Responder", root_ca, ocsp_signing=True)


@pytest.fixture(scope="session")
def rsa_responder(intermediate_ca: IssuedCertificate) -> IssuedCertificate:
    """An OCSP responder certificate with an RSA key, issued by the intermediate CA."""
    return issue_certificate("Test RSA OCSP Responder", intermediate_ca, ocsp_signing=True, rsa_key=True)
