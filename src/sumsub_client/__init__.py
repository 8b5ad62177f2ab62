"""
Sumsub Client - signed API client and webhook verification.

Supports:
- HMAC request signing (X-App-Access-Ts / X-App-Access-Sig)
- Typed request/response dispatch with structured API errors
- Webhook digest verification (HMAC SHA-1, SHA-256, SHA-512)
"""

from sumsub_client.client import Client
from sumsub_client.config import ClientConfig
from sumsub_client.errors import (
    APIError,
    DecodeError,
    EncodeError,
    ErrorCode,
    ResponseValidationError,
    StatusCodeError,
    SumsubError,
    as_api_error,
)
from sumsub_client.models import (
    AccessTokenRequest,
    CreateApplicantRequest,
    FixedInfo,
    WebSDKLinkRequest,
)
from sumsub_client.signer import HMACSigner, Signer
from sumsub_client.webhook import (
    DigestAlgorithm,
    WebhookFailure,
    WebhookVerificationError,
    WebhookVerifier,
    verify_webhook_digest,
    verify_webhook_headers,
    verify_webhook_request,
)

__version__ = "0.1.0"

__all__ = [
    "Client",
    "ClientConfig",
    "APIError",
    "DecodeError",
    "EncodeError",
    "ErrorCode",
    "ResponseValidationError",
    "StatusCodeError",
    "SumsubError",
    "as_api_error",
    "AccessTokenRequest",
    "CreateApplicantRequest",
    "FixedInfo",
    "WebSDKLinkRequest",
    "HMACSigner",
    "Signer",
    "DigestAlgorithm",
    "WebhookFailure",
    "WebhookVerificationError",
    "WebhookVerifier",
    "verify_webhook_digest",
    "verify_webhook_headers",
    "verify_webhook_request",
]
