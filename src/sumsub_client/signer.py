"""
Request signing for the Sumsub API.

Every outbound request carries an HMAC over the canonical string
``<unix seconds><METHOD><uri><body>``, hex encoded in lowercase.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Union

from cryptography.hazmat.primitives import hashes, hmac

Timestamp = Union[datetime, int]


class Signer(Protocol):
    """Anything that can sign an outbound request."""

    def sign(self, t: Timestamp, method: str, uri: str, payload: bytes) -> str:
        ...


def unix_seconds(t: Timestamp) -> int:
    """Convert a datetime or integer timestamp to whole Unix seconds."""
    if isinstance(t, datetime):
        return int(t.timestamp())
    return int(t)


def canonical_string(t: Timestamp, method: str, uri: str, payload: bytes) -> bytes:
    """Build the delimiter-free signing input.

    Args:
        t: Request time.
        method: HTTP method, as sent.
        uri: Path plus encoded query string.
        payload: Serialized request body; empty when there is none.

    Returns:
        The bytes to be signed.
    """
    prefix = f"{unix_seconds(t)}{method}{uri}".encode("utf-8")
    return prefix + (payload or b"")


class HMACSigner:
    """HMAC request signer (SHA-256 by default).

    A fresh HMAC context is created for every call, so a single instance can
    be shared freely between threads.
    """

    def __init__(
        self,
        secret: str | bytes,
        algorithm: hashes.HashAlgorithm | None = None,
    ) -> None:
        """Initialize the signer.

        Args:
            secret: The application secret key.
            algorithm: Hash algorithm for the HMAC. Defaults to SHA-256.
        """
        self._secret = secret.encode("utf-8") if isinstance(secret, str) else bytes(secret)
        self._algorithm = algorithm or hashes.SHA256()

    def sign(self, t: Timestamp, method: str, uri: str, payload: bytes) -> str:
        """Sign a request.

        Args:
            t: Request time; the same value must go into X-App-Access-Ts.
            method: HTTP method.
            uri: Path plus encoded query string.
            payload: Serialized request body.

        Returns:
            Lowercase hex signature.
        """
        h = hmac.HMAC(self._secret, self._algorithm)
        h.update(canonical_string(t, method, uri, payload))
        return h.finalize().hex()

    def __repr__(self) -> str:
        return f"HMACSigner(algorithm={self._algorithm.name})"
