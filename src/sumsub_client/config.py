"""Client configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

import httpx

DEFAULT_HOST = "api.sumsub.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_CONNECT_TIMEOUT = 10.0

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ClientConfig:
    """Options recognized by :class:`sumsub_client.client.Client`.

    Attributes:
        host: API host name, without scheme.
        http_client: Transport to send requests with. When omitted the client
            builds one from ``timeout`` and closes it on :meth:`Client.close`.
        now: Clock used for request timestamps.
        timeout: Overall timeout in seconds for the default transport.
    """

    host: str = DEFAULT_HOST
    http_client: httpx.Client | None = None
    now: Clock = field(default=utc_now)
    timeout: float = DEFAULT_TIMEOUT

    def build_http_client(self) -> httpx.Client:
        """Create the default transport.

        Proxies are taken from the environment, connections are kept alive,
        and connect (including the TLS handshake) is capped separately from
        the overall timeout.
        """
        return httpx.Client(
            timeout=httpx.Timeout(
                self.timeout,
                connect=min(DEFAULT_CONNECT_TIMEOUT, self.timeout),
            ),
            limits=httpx.Limits(keepalive_expiry=DEFAULT_TIMEOUT),
            trust_env=True,
        )
