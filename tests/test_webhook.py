"""Tests for webhook digest verification."""

import hashlib
import hmac

import httpx
import pytest

from sumsub_client import (
    DigestAlgorithm,
    WebhookFailure,
    WebhookVerificationError,
    WebhookVerifier,
    verify_webhook_digest,
    verify_webhook_headers,
    verify_webhook_request,
)


def hmac_hex(secret: str, payload: bytes, digestmod=hashlib.sha256) -> str:
    """Compute a webhook digest the way the sender does."""
    return hmac.new(secret.encode(), payload, digestmod).hexdigest()


class TestVerifyWebhookDigest:
    """Tests for the four-argument form."""

    def test_valid_sha1_known_digest(self):
        """Test a known HMAC-SHA1 digest."""
        verify_webhook_digest(
            b"someText",
            "SoMe_SeCrEt_KeY",
            "HMAC_SHA1_HEX",
            "f6e92ffe371718694d46e28436f76589312df8db",
        )

    @pytest.mark.parametrize(
        "algorithm, digestmod",
        [
            ("HMAC_SHA256_HEX", hashlib.sha256),
            ("HMAC_SHA512_HEX", hashlib.sha512),
            ("HMAC_SHA1_HEX", hashlib.sha1),
        ],
    )
    def test_valid_digest(self, algorithm, digestmod):
        """Test each supported algorithm."""
        payload = b'{"type":"applicantReviewed"}'
        verify_webhook_digest(payload, "secret123", algorithm, hmac_hex("secret123", payload, digestmod))

    def test_enum_algorithm(self):
        """Test passing the algorithm as an enum member."""
        digest = hmac_hex("secret", b"test")
        verify_webhook_digest(b"test", "secret", DigestAlgorithm.HMAC_SHA256_HEX, digest)

    def test_uppercase_digest(self):
        """Test that hex decoding is case-insensitive."""
        digest = hmac_hex("secret", b"test").upper()
        verify_webhook_digest(b"test", "secret", "HMAC_SHA256_HEX", digest)

    def test_bytes_secret(self):
        """Test a secret given as bytes."""
        verify_webhook_digest(b"test", b"secret", "HMAC_SHA256_HEX", hmac_hex("secret", b"test"))

    @pytest.mark.parametrize(
        "secret, algorithm, digest, reason, message",
        [
            ("secret", "HMAC_SHA256_HEX", "", WebhookFailure.EMPTY_DIGEST, "empty digest"),
            ("", "HMAC_SHA256_HEX", "abc123", WebhookFailure.EMPTY_SECRET_KEY, "empty secret key"),
            (
                "secret",
                "HMAC_MD5_HEX",
                "abc123",
                WebhookFailure.UNSUPPORTED_ALGORITHM,
                "unsupported algo: HMAC_MD5_HEX",
            ),
            ("secret", "", "abc123", WebhookFailure.UNSUPPORTED_ALGORITHM, "unsupported algo: "),
            ("secret", "HMAC_SHA256_HEX", "invalid_hex", WebhookFailure.MALFORMED_DIGEST, "malformed digest"),
            ("secret", "HMAC_SHA256_HEX", "abc", WebhookFailure.MALFORMED_DIGEST, "malformed digest"),
            ("secret", "HMAC_SHA256_HEX", "ab cd", WebhookFailure.MALFORMED_DIGEST, "malformed digest"),
            ("secret", "HMAC_SHA256_HEX", "0" * 64, WebhookFailure.DIGEST_MISMATCH, "digest mismatch"),
            ("secret", "HMAC_SHA256_HEX", "abcd", WebhookFailure.DIGEST_MISMATCH, "digest mismatch"),
        ],
    )
    def test_failures(self, secret, algorithm, digest, reason, message):
        """Test each failure reason and its message."""
        with pytest.raises(WebhookVerificationError) as exc_info:
            verify_webhook_digest(b"test", secret, algorithm, digest)
        assert exc_info.value.reason is reason
        assert str(exc_info.value) == message

    def test_empty_digest_checked_before_secret(self):
        """Test that an empty digest wins over an empty secret."""
        with pytest.raises(WebhookVerificationError) as exc_info:
            verify_webhook_digest(b"test", "", "HMAC_MD5_HEX", "")
        assert exc_info.value.reason is WebhookFailure.EMPTY_DIGEST


class TestSingleByteMutation:
    """A valid verification must fail after any one-byte change."""

    payload = b"test body content"
    secret = "secret_key"

    def digest(self):
        return hmac_hex(self.secret, self.payload)

    def test_baseline(self):
        """Test that the unmodified input verifies."""
        verify_webhook_digest(self.payload, self.secret, "HMAC_SHA256_HEX", self.digest())

    def test_payload_mutation(self):
        """Test flipping one payload byte."""
        mutated = bytearray(self.payload)
        mutated[0] ^= 0x01
        with pytest.raises(WebhookVerificationError) as exc_info:
            verify_webhook_digest(bytes(mutated), self.secret, "HMAC_SHA256_HEX", self.digest())
        assert exc_info.value.reason is WebhookFailure.DIGEST_MISMATCH

    def test_secret_mutation(self):
        """Test changing one secret character."""
        with pytest.raises(WebhookVerificationError) as exc_info:
            verify_webhook_digest(self.payload, "secret_keY", "HMAC_SHA256_HEX", self.digest())
        assert exc_info.value.reason is WebhookFailure.DIGEST_MISMATCH

    def test_digest_mutation(self):
        """Test changing one digest byte."""
        raw = bytearray(bytes.fromhex(self.digest()))
        raw[-1] ^= 0xFF
        with pytest.raises(WebhookVerificationError) as exc_info:
            verify_webhook_digest(self.payload, self.secret, "HMAC_SHA256_HEX", raw.hex())
        assert exc_info.value.reason is WebhookFailure.DIGEST_MISMATCH


class TestVerifyWebhookRequest:
    """Tests for the header/request-bound forms."""

    def make_request(self, body: bytes, algorithm: str, digest: str) -> httpx.Request:
        return httpx.Request(
            "POST",
            "https://example.com/webhook",
            content=body,
            headers={"X-Payload-Digest-Alg": algorithm, "X-Payload-Digest": digest},
        )

    @pytest.mark.parametrize(
        "algorithm, digestmod",
        [
            ("HMAC_SHA256_HEX", hashlib.sha256),
            ("HMAC_SHA1_HEX", hashlib.sha1),
            ("HMAC_SHA512_HEX", hashlib.sha512),
        ],
    )
    def test_valid_request(self, algorithm, digestmod):
        """Test a correctly signed request."""
        body = b"test body content"
        request = self.make_request(body, algorithm, hmac_hex("secret_key_1", body, digestmod))
        verify_webhook_request(request, "secret_key_1")

    def test_empty_body(self):
        """Test a correctly signed empty body."""
        request = self.make_request(b"", "HMAC_SHA256_HEX", hmac_hex("secret_key_4", b""))
        verify_webhook_request(request, "secret_key_4")

    def test_missing_digest_header(self):
        """Test a request without a digest."""
        request = self.make_request(b"test", "HMAC_SHA256_HEX", "")
        with pytest.raises(WebhookVerificationError, match="empty digest"):
            verify_webhook_request(request, "secret")

    def test_missing_algorithm_header(self):
        """Test a request without an algorithm."""
        request = httpx.Request(
            "POST",
            "https://example.com/webhook",
            content=b"test",
            headers={"X-Payload-Digest": hmac_hex("secret", b"test")},
        )
        with pytest.raises(WebhookVerificationError) as exc_info:
            verify_webhook_request(request, "secret")
        assert str(exc_info.value) == "unsupported algo: "

    def test_invalid_digest_format(self):
        """Test a request with a non-hex digest."""
        request = self.make_request(b"test", "HMAC_SHA256_HEX", "invalid_hex")
        with pytest.raises(WebhookVerificationError, match="malformed digest"):
            verify_webhook_request(request, "secret")

    def test_headers_case_insensitive(self):
        """Test header lookup with lowercase names from a plain dict."""
        body = b'{"applicantId":"abc"}'
        headers = {
            "x-payload-digest-alg": "HMAC_SHA256_HEX",
            "x-payload-digest": hmac_hex("secret", body),
        }
        verify_webhook_headers(headers, body, "secret")


class TestWebhookVerifier:
    """Tests for the bound verifier."""

    def test_verify_and_is_valid(self):
        """Test the exception and boolean forms."""
        verifier = WebhookVerifier("secret")
        digest = hmac_hex("secret", b"payload")

        verifier.verify(b"payload", "HMAC_SHA256_HEX", digest)
        assert verifier.is_valid(b"payload", "HMAC_SHA256_HEX", digest) is True
        assert verifier.is_valid(b"payload!", "HMAC_SHA256_HEX", digest) is False

    def test_verify_headers(self):
        """Test verifying from headers."""
        verifier = WebhookVerifier("secret")
        body = b"payload"
        verifier.verify_headers(
            {"X-Payload-Digest-Alg": "HMAC_SHA512_HEX", "X-Payload-Digest": hmac_hex("secret", body, hashlib.sha512)},
            body,
        )

    def test_repr_hides_secret(self):
        """Test that the secret is not part of the repr."""
        assert "hunter2" not in repr(WebhookVerifier("hunter2"))
