"""
Webhook payload verification.

The API signs every webhook body with an HMAC keyed by the webhook secret
and sends the hex digest in ``X-Payload-Digest`` along with the algorithm
tag in ``X-Payload-Digest-Alg``.

Reading a request body is usually destructive. Integrations that verify a
request and then hand it on must buffer the body themselves; nothing here
restores it.
"""

from __future__ import annotations

import binascii
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Protocol

import httpx
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from sumsub_client.errors import SumsubError

logger = logging.getLogger(__name__)

DIGEST_ALGORITHM_HEADER = "X-Payload-Digest-Alg"
DIGEST_HEADER = "X-Payload-Digest"


class DigestAlgorithm(Enum):
    """Supported values of the digest algorithm header."""

    HMAC_SHA256_HEX = "HMAC_SHA256_HEX"
    HMAC_SHA512_HEX = "HMAC_SHA512_HEX"
    HMAC_SHA1_HEX = "HMAC_SHA1_HEX"

    def hash_algorithm(self) -> hashes.HashAlgorithm:
        if self is DigestAlgorithm.HMAC_SHA512_HEX:
            return hashes.SHA512()
        if self is DigestAlgorithm.HMAC_SHA1_HEX:
            return hashes.SHA1()
        return hashes.SHA256()


class WebhookFailure(Enum):
    """Why a webhook payload was rejected."""

    EMPTY_DIGEST = "empty digest"
    EMPTY_SECRET_KEY = "empty secret key"
    UNSUPPORTED_ALGORITHM = "unsupported algo"
    MALFORMED_DIGEST = "malformed digest"
    DIGEST_MISMATCH = "digest mismatch"


class WebhookVerificationError(SumsubError):
    """Raised when a webhook payload fails verification."""

    def __init__(self, reason: WebhookFailure, message: str | None = None) -> None:
        super().__init__(message or reason.value)
        self.reason = reason


class InboundRequest(Protocol):
    """Minimal request shape accepted by :func:`verify_webhook_request`.

    ``httpx.Request`` satisfies it.
    """

    @property
    def headers(self) -> Mapping[str, str]:
        ...

    def read(self) -> bytes:
        ...


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


def verify_webhook_digest(
    payload: bytes,
    secret_key: str | bytes,
    algorithm: str | DigestAlgorithm,
    digest_hex: str,
) -> None:
    """Verify a webhook payload against its digest.

    Args:
        payload: Raw request body, exactly as received.
        secret_key: The webhook secret.
        algorithm: Value of the digest algorithm header.
        digest_hex: Value of the digest header.

    Raises:
        WebhookVerificationError: If the digest is missing, malformed or
            does not match, the secret is empty, or the algorithm is not
            supported.
    """
    if not digest_hex:
        raise WebhookVerificationError(WebhookFailure.EMPTY_DIGEST)
    if not secret_key:
        raise WebhookVerificationError(WebhookFailure.EMPTY_SECRET_KEY)

    if isinstance(algorithm, DigestAlgorithm):
        algo = algorithm
    else:
        try:
            algo = DigestAlgorithm(algorithm)
        except ValueError:
            raise WebhookVerificationError(
                WebhookFailure.UNSUPPORTED_ALGORITHM,
                f"unsupported algo: {algorithm}",
            ) from None

    mac = hmac.HMAC(_as_bytes(secret_key), algo.hash_algorithm())
    mac.update(payload)

    try:
        expected = binascii.unhexlify(digest_hex)
    except (binascii.Error, ValueError):
        raise WebhookVerificationError(WebhookFailure.MALFORMED_DIGEST) from None

    try:
        # constant-time
        mac.verify(expected)
    except InvalidSignature:
        logger.debug("Webhook digest mismatch (%s)", algo.value)
        raise WebhookVerificationError(WebhookFailure.DIGEST_MISMATCH) from None


def verify_webhook_headers(
    headers: Mapping[str, str],
    body: bytes,
    secret_key: str | bytes,
) -> None:
    """Verify a webhook given its headers and raw body.

    Header lookup is case-insensitive. Missing headers are treated as empty
    values and fail the same way an empty value would.
    """
    normalized = httpx.Headers(headers)
    verify_webhook_digest(
        body,
        secret_key,
        normalized.get(DIGEST_ALGORITHM_HEADER, ""),
        normalized.get(DIGEST_HEADER, ""),
    )


def verify_webhook_request(request: InboundRequest, secret_key: str | bytes) -> None:
    """Verify an inbound webhook request.

    The full body is read from ``request``. Callers that need the body
    afterwards must make sure it can be read again.
    """
    verify_webhook_headers(request.headers, request.read(), secret_key)


class WebhookVerifier:
    """Webhook verifier bound to one secret key."""

    def __init__(self, secret_key: str | bytes) -> None:
        self._secret_key = secret_key

    def verify(
        self,
        payload: bytes,
        algorithm: str | DigestAlgorithm,
        digest_hex: str,
    ) -> None:
        verify_webhook_digest(payload, self._secret_key, algorithm, digest_hex)

    def verify_headers(self, headers: Mapping[str, str], body: bytes) -> None:
        verify_webhook_headers(headers, body, self._secret_key)

    def verify_request(self, request: InboundRequest) -> None:
        verify_webhook_request(request, self._secret_key)

    def is_valid(
        self,
        payload: bytes,
        algorithm: str | DigestAlgorithm,
        digest_hex: str,
    ) -> bool:
        """Boolean form of :meth:`verify`."""
        try:
            self.verify(payload, algorithm, digest_hex)
        except WebhookVerificationError:
            return False
        return True

    def __repr__(self) -> str:
        return "WebhookVerifier(secret_key=***)"
