"""Webhook signature verification.

The strategy is chosen once at startup from settings:

- ``DisabledVerifier``: no secret configured, every delivery is accepted.
- ``HmacVerifier``: base64(HMAC-SHA512(secret, body)), compared in constant time.
- ``RsaVerifier``: RSA PKCS#1 v1.5 / SHA-256 signature, base64 encoded.

``verify`` never raises for attacker-controlled input; a malformed signature
is an ordinary negative result.
"""

import base64
import binascii
import hashlib
import hmac
import logging
from abc import ABC, abstractmethod

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from hookrelay.config import Settings
from hookrelay.errors.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Hook-Signature"


def sign_hmac(payload: bytes, secret: str | bytes) -> str:
    """Return base64(HMAC-SHA512) of ``payload`` keyed with ``secret``."""
    key = secret.encode("utf-8") if isinstance(secret, str) else secret
    digest = hmac.new(key, payload, hashlib.sha512).digest()
    return base64.b64encode(digest).decode("ascii")


class SignatureVerifier(ABC):
    """Verify a webhook body against the signature sent with it."""

    mode: str = ""

    @abstractmethod
    def verify(self, payload: bytes, signature: str) -> bool:
        """Return True if ``signature`` authenticates ``payload``."""


class DisabledVerifier(SignatureVerifier):
    """Accept-any verifier used when no secret is configured."""

    mode = "disabled"

    def verify(self, payload: bytes, signature: str) -> bool:
        return True


class HmacVerifier(SignatureVerifier):
    """Shared-secret HMAC-SHA512 verifier."""

    mode = "hmac"

    def __init__(self, secret: str | bytes):
        self._key = secret.encode("utf-8") if isinstance(secret, str) else secret

    def verify(self, payload: bytes, signature: str) -> bool:
        expected = sign_hmac(payload, self._key).encode("ascii")
        return hmac.compare_digest(expected, signature.encode("utf-8"))


class RsaVerifier(SignatureVerifier):
    """RSA public-key verifier (PKCS#1 v1.5 padding, SHA-256 digest)."""

    mode = "rsa"

    def __init__(self, public_key: rsa.RSAPublicKey):
        self._public_key = public_key

    @classmethod
    def from_base64_der(cls, blob: str) -> "RsaVerifier":
        """Parse a base64 DER SubjectPublicKeyInfo blob.

        Raises:
            ConfigurationError: if the blob is not base64, not DER, or not RSA.
        """
        try:
            der = base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ConfigurationError(f"Webhook public key is not valid base64: {exc}") from exc

        try:
            key = serialization.load_der_public_key(der)
        except (ValueError, UnsupportedAlgorithm) as exc:
            raise ConfigurationError(f"Webhook public key could not be parsed: {exc}") from exc

        if not isinstance(key, rsa.RSAPublicKey):
            raise ConfigurationError("Webhook public key is not an RSA public key")
        return cls(key)

    def verify(self, payload: bytes, signature: str) -> bool:
        try:
            sig_bytes = base64.b64decode(signature, validate=True)
        except (binascii.Error, ValueError):
            return False

        try:
            self._public_key.verify(sig_bytes, payload, padding.PKCS1v15(), hashes.SHA256())
        except InvalidSignature:
            return False
        return True


def build_verifier(settings: Settings) -> SignatureVerifier:
    """Select the verification strategy for the configured secret and mode."""
    if not settings.verification_enabled:
        logger.warning(
            "WEBHOOK_SECRET not set, webhook signature verification is disabled"
        )
        return DisabledVerifier()

    if settings.webhook_verification_mode == "rsa":
        verifier = RsaVerifier.from_base64_der(settings.webhook_secret)
    else:
        verifier = HmacVerifier(settings.webhook_secret)

    logger.info("Webhook signature verification enabled (mode=%s)", verifier.mode)
    return verifier
