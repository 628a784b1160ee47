from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from urllib.parse import urlparse

import httpx

from .config import OUTBOUND_TIMEOUT, TARGET_URL_HEADER, relay_url


@dataclass(frozen=True)
class RelayReply:
    status: int
    status_text: str
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes = b""


Requester = Callable[[str, str, dict[str, str], bytes | None], Awaitable[RelayReply]]


def _validate_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"}:
        raise ValueError(f"Unsupported URL scheme: {parsed.scheme or 'missing'}")


class RelayClient:
    """Sends requests through the local relay using the wire contract.

    The destination travels in the ``x-target-url`` header; the relay URL
    itself is always the same loopback endpoint.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = OUTBOUND_TIMEOUT,
        requester: Requester | None = None,
    ) -> None:
        self.base_url = base_url or relay_url()
        _validate_url(self.base_url)
        self._transport = transport
        self._timeout = timeout
        self._requester = requester

    async def forward(
        self,
        method: str,
        target_url: str,
        headers: Mapping[str, str],
        body: bytes | None = None,
    ) -> RelayReply:
        outbound = dict(headers)
        outbound[TARGET_URL_HEADER] = target_url
        if self._requester is not None:
            return await self._requester(method, target_url, outbound, body)
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            resp = await client.request(method, self.base_url, headers=outbound, content=body)
            return RelayReply(
                status=resp.status_code,
                status_text=resp.reason_phrase,
                headers=dict(resp.headers.items()),
                content=resp.content,
            )
