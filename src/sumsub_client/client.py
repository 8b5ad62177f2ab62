"""
Sumsub API client.

Every request is signed with :class:`~sumsub_client.signer.HMACSigner` (or a
caller-supplied signer) and dispatched through :meth:`Client.call`, which
returns the decoded answer or raises one of the errors in
:mod:`sumsub_client.errors`. Transport errors from httpx are not wrapped.

No retries, rate limiting or caching happen here.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol, TypeVar
from urllib.parse import quote, urlparse

import httpx

from sumsub_client.config import ClientConfig
from sumsub_client.errors import (
    DecodeError,
    EncodeError,
    ResponseValidationError,
    classify_response,
)
from sumsub_client.models import (
    AccessToken,
    AccessTokenRequest,
    Applicant,
    CreateApplicantRequest,
    CreatedApplicant,
    HealthStatus,
    ReviewStatus,
    WebSDKLink,
    WebSDKLinkRequest,
)
from sumsub_client.signer import HMACSigner, Signer, unix_seconds

logger = logging.getLogger(__name__)

A = TypeVar("A", covariant=True)

CONTENT_TYPE = "application/json"


class Decodable(Protocol[A]):
    """Answer type accepted by :meth:`Client.call`."""

    def from_dict(self, data: dict[str, Any]) -> A:
        ...


def encode_body(body: Any) -> bytes:
    """Serialize a request body to compact JSON.

    Args:
        body: None for no body, a mapping, or an object with ``to_dict``.

    Returns:
        The payload; empty when there is no body.

    Raises:
        EncodeError: If the body cannot be serialized.
    """
    if body is None:
        return b""
    if hasattr(body, "to_dict"):
        body = body.to_dict()
    try:
        return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodeError(f"marshal: {e}") from e


def decode_body(body: bytes, answer: Decodable[A] | None) -> Any:
    """Decode a successful response body.

    An empty body leaves the answer at its defaults.

    Raises:
        DecodeError: If the body is not valid JSON or does not fit ``answer``.
    """
    if not body:
        return answer.from_dict({}) if answer is not None else None

    try:
        data = json.loads(body)
    except ValueError as e:
        raise DecodeError("json: not valid") from e

    if answer is None:
        return data
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise DecodeError(f"json: unmarshal: expected object, got {type(data).__name__}")
    try:
        return answer.from_dict(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"json: unmarshal: {e}") from e


class Client:
    """Signed client for the Sumsub REST API."""

    def __init__(
        self,
        token: str,
        signer: Signer | str | bytes,
        config: ClientConfig | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: The application token sent in X-App-Token.
            signer: A signer, or the application secret key to build an
                HMAC-SHA256 signer from.
            config: Host, transport and clock overrides.
        """
        config = config or ClientConfig()
        self.host = config.host
        self._token = token
        self._signer = HMACSigner(signer) if isinstance(signer, (str, bytes)) else signer
        self._now = config.now
        self._owns_http = config.http_client is None
        self._http = config.http_client if config.http_client is not None else config.build_http_client()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_http:
            self._http.close()

    def call(
        self,
        method: str,
        uri: str,
        body: Any = None,
        answer: Decodable[A] | None = None,
    ) -> Any:
        """Send a signed request and decode the answer.

        Args:
            method: HTTP method.
            uri: Path plus encoded query string, exactly as it is signed.
            body: Request body (see :func:`encode_body`).
            answer: Type to decode a successful response into. When None the
                parsed JSON is returned as-is.

        Returns:
            The decoded answer.

        Raises:
            EncodeError: If the body cannot be serialized.
            APIError: If the API returned a structured error.
            StatusCodeError: If the API returned any other non-200 response.
            DecodeError: If a 200 response cannot be decoded.
            httpx.TransportError: On network failures, unmodified.
        """
        payload = encode_body(body)
        now = self._now()

        headers = {
            "Accept": CONTENT_TYPE,
            "Content-Type": CONTENT_TYPE,
            "X-App-Token": self._token,
            "X-App-Access-Ts": str(unix_seconds(now)),
            "X-App-Access-Sig": self._signer.sign(now, method, uri, payload),
        }

        logger.debug("%s %s", method, uri)
        response = self._http.request(
            method,
            f"https://{self.host}{uri}",
            content=payload or None,
            headers=headers,
        )
        content = response.read()
        logger.debug("%s %s -> %d", method, uri, response.status_code)

        if response.status_code != httpx.codes.OK:
            raise classify_response(response.status_code, content)

        return decode_body(content, answer)

    def generate_access_token_sdk(self, req: AccessTokenRequest) -> AccessToken:
        """Issue an access token for the Web/Mobile SDK.

        Raises:
            ResponseValidationError: If the token was issued for another user.
        """
        token = self.call("POST", "/resources/accessTokens/sdk", req, AccessToken)
        if token.user_id != req.user_id:
            raise ResponseValidationError(
                f"user id mismatch: `{token.user_id}` not equal `{req.user_id}`"
            )
        return token

    def generate_external_websdk_link(self, req: WebSDKLinkRequest) -> WebSDKLink:
        """Create an external WebSDK link for an applicant.

        Raises:
            ResponseValidationError: If the returned link is not an absolute URL.
        """
        link = self.call("POST", req.uri(), {}, WebSDKLink)
        parsed = urlparse(link.url)
        if not parsed.scheme or not parsed.netloc:
            raise ResponseValidationError(f"invalid link: {link.url!r}")
        return link

    def applicant_review_status(self, applicant_id: str) -> ReviewStatus:
        """Get the review status of an applicant."""
        return self.call(
            "GET",
            f"/resources/applicants/{quote(applicant_id, safe='')}/status",
            answer=ReviewStatus,
        )

    def applicant_data(
        self,
        applicant_id: str | None = None,
        external_user_id: str | None = None,
    ) -> Applicant:
        """Get applicant data by applicant id or by external user id.

        Raises:
            ValueError: If neither id is given.
        """
        if applicant_id:
            uri = f"/resources/applicants/{quote(applicant_id, safe='')}/one"
        elif external_user_id:
            uri = f"/resources/applicants/-;externalUserId={quote(external_user_id, safe='')}/one"
        else:
            raise ValueError("applicant id or external user id required")
        return self.call("GET", uri, answer=Applicant)

    def create_applicant(self, req: CreateApplicantRequest) -> CreatedApplicant:
        """Create an applicant."""
        return self.call("POST", "/resources/applicants", req, CreatedApplicant)

    def health(self) -> None:
        """Check the operational status of the API."""
        self.call("GET", "/resources/status/api", answer=HealthStatus)
