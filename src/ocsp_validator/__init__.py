"""
ocsp_validator — OCSP revocation-status decision engine.

Given a certificate and an already-decoded OCSP response, decides whether the
certificate is good, revoked or of indeterminate status, and whether the
response was signed by a party entitled to speak for the issuing CA.

Outcomes are appended to a caller-owned ValidationReport; provider errors
travel as explicit Result values and never escape the engine.
"""

__version__ = "0.1.0"
