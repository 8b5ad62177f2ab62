"""
Error taxonomy for the Sumsub API client.

Transport failures are not wrapped: they surface as the ``httpx``
exceptions raised by the transport. Everything the client itself detects
derives from :class:`SumsubError`.
"""

from __future__ import annotations

import json
from enum import IntEnum
from typing import Any


class SumsubError(Exception):
    """Base class for errors raised by the client."""


class EncodeError(SumsubError):
    """Raised when a request body cannot be serialized."""


class DecodeError(SumsubError):
    """Raised when a successful response body cannot be decoded."""


class StatusCodeError(SumsubError):
    """Raised for a non-success response without a structured error body."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"status code: {status_code}")
        self.status_code = status_code


class ResponseValidationError(SumsubError):
    """Raised when a decoded answer fails a call-specific check."""


class ErrorCode(IntEnum):
    """Documented ``errorCode`` values returned by the API."""

    DUPLICATE_DOCUMENT = 1000
    TOO_MANY_DOCUMENTS = 1001
    FILE_TOO_BIG = 1002
    EMPTY_FILE = 1003
    CORRUPTED_FILE = 1004
    UNSUPPORTED_FILE_FORMAT = 1005
    NO_UPLOAD_VERIFICATION_IN_PROGRESS = 1006
    INCORRECT_FILE_SIZE = 1007
    APPLICANT_MARKED_AS_DELETED = 1008
    APPLICANT_WITH_FINAL_REJECT = 1009
    DOC_TYPE_NOT_IN_REQ_DOCS = 1010
    ENCRYPTED_FILE = 1011
    APPLICANT_ALREADY_IN_THE_STATE = 3000
    APP_TOKEN_INVALID_FORMAT = 4000
    APP_TOKEN_NOT_FOUND = 4001
    APP_TOKEN_PRIVATE_PART_MISMATCH = 4002
    APP_TOKEN_SIGNATURE_MISMATCH = 4003
    APP_TOKEN_REQUEST_EXPIRED = 4004
    APP_TOKEN_INVALID_VALUE = 4005
    APP_TOKEN_NOT_ALL_AUTH_PARAMS_PROVIDED = 4006
    APP_TOKEN_INVALID_PARAMS = 4007
    APPLICANT_ALREADY_BLACKLISTED = 5000
    APPLICANT_ALREADY_WHITELISTED = 5001


class APIError(SumsubError):
    """Structured error returned by the API for a non-success response.

    Callers should branch on :attr:`error_code` (or :attr:`kind`), never on
    the free-text description.
    """

    def __init__(
        self,
        description: str,
        code: int,
        correlation_id: str,
        error_code: int,
        error_name: str,
    ) -> None:
        self._description = description
        self._code = code
        self._correlation_id = correlation_id
        self._error_code = error_code
        self._error_name = error_name
        super().__init__(
            f"{description} (code: {code}, errorCode: {error_code}, "
            f"correlationId: {correlation_id})"
        )

    @property
    def description(self) -> str:
        return self._description

    @property
    def code(self) -> int:
        return self._code

    @property
    def correlation_id(self) -> str:
        return self._correlation_id

    @property
    def error_code(self) -> int:
        return self._error_code

    @property
    def error_name(self) -> str:
        return self._error_name

    @property
    def kind(self) -> ErrorCode | None:
        """The catalog entry for :attr:`error_code`, if it is a known one."""
        try:
            return ErrorCode(self._error_code)
        except ValueError:
            return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> APIError:
        """Create an APIError from a decoded error body.

        Args:
            data: The JSON object returned by the API.

        Returns:
            The parsed APIError.

        Raises:
            TypeError: If a field has the wrong JSON type.
        """
        description = _field(data, "description", str, "")
        code = _field(data, "code", int, 0)
        correlation_id = _field(data, "correlationId", str, "")
        error_code = _field(data, "errorCode", int, 0)
        error_name = _field(data, "errorName", str, "")
        return cls(
            description=description,
            code=code,
            correlation_id=correlation_id,
            error_code=error_code,
            error_name=error_name,
        )

    def to_dict(self) -> dict[str, Any]:
        """Encode back to the wire shape."""
        return {
            "description": self._description,
            "code": self._code,
            "correlationId": self._correlation_id,
            "errorCode": self._error_code,
            "errorName": self._error_name,
        }

    def __repr__(self) -> str:
        return (
            f"APIError(code={self._code}, error_code={self._error_code}, "
            f"error_name={self._error_name!r}, "
            f"correlation_id={self._correlation_id!r})"
        )


def _field(data: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    # bool is an int subclass but never a valid code
    if not isinstance(value, kind) or isinstance(value, bool):
        raise TypeError(f"{key}: expected {kind.__name__}, got {type(value).__name__}")
    return value


def as_api_error(exc: BaseException | None) -> APIError | None:
    """Find an APIError in an exception's cause/context chain.

    Args:
        exc: The exception caught by the caller.

    Returns:
        The first APIError found, or None.
    """
    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        if isinstance(exc, APIError):
            return exc
        seen.add(id(exc))
        exc = exc.__cause__ or exc.__context__
    return None


def classify_response(status_code: int, body: bytes) -> SumsubError:
    """Turn a non-success response into the matching error.

    Args:
        status_code: HTTP status of the response.
        body: The full response body.

    Returns:
        An APIError when the body is a JSON object (or ``null``), otherwise a
        StatusCodeError carrying only the status. Fields the object lacks
        keep their zero values.
    """
    if not body:
        return StatusCodeError(status_code)
    try:
        data = json.loads(body)
    except ValueError:
        return StatusCodeError(status_code)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return StatusCodeError(status_code)
    try:
        return APIError.from_dict(data)
    except TypeError:
        return StatusCodeError(status_code)
