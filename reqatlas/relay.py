"""Loopback forwarding relay.

Accepts any method on a single path, re-issues the request to the URL named
in the ``x-target-url`` header and hands back the origin's status, headers
and body. The relay answers with its own permissive CORS policy; the
origin's ``access-control-*`` headers are never forwarded.
"""

import ipaddress
import logging

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.types import Receive, Scope, Send

from .config import (
    GATEWAY_ERROR_STATUS,
    INBOUND_SKIP_HEADERS,
    OUTBOUND_SKIP_HEADERS,
    OUTBOUND_TIMEOUT,
    RELAY_PATH,
    TARGET_URL_HEADER,
    relay_settings,
)

logger = logging.getLogger(__name__)

BODYLESS_METHODS = frozenset({"GET", "HEAD"})


class AnyMethodEndpoint:
    """ASGI wrapper that hands every request to ``handler`` regardless of method."""

    def __init__(self, handler) -> None:
        self.handler = handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = await self.handler(Request(scope, receive))
        await response(scope, receive, send)


def forwardable_request_headers(request: Request) -> dict[str, str]:
    headers: dict[str, str] = {}
    for key, value in request.headers.items():
        if key.lower() in INBOUND_SKIP_HEADERS:
            continue
        headers[key] = f"{headers[key]}, {value}" if key in headers else value
    return headers


def copy_origin_headers(origin: httpx.Response, response: Response) -> None:
    for key, value in origin.headers.multi_items():
        lowered = key.lower()
        if lowered in OUTBOUND_SKIP_HEADERS or lowered.startswith("access-control-"):
            continue
        response.headers.append(key, value)


def create_relay_app(
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float = OUTBOUND_TIMEOUT,
    path: str = RELAY_PATH,
) -> FastAPI:
    """Build the relay application.

    ``transport`` replaces the network transport used for the outbound leg,
    which lets tests stand in for the origin without opening sockets.
    """
    app = FastAPI(title="reqatlas relay", docs_url=None, redoc_url=None, openapi_url=None)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    async def forward(request: Request) -> Response:
        target = request.headers.get(TARGET_URL_HEADER)
        if not target:
            logger.warning("Missing %s header", TARGET_URL_HEADER)
            return PlainTextResponse(f"Missing {TARGET_URL_HEADER} header", status_code=400)

        method = request.method.upper()
        logger.info("Forwarding %s request to: %s", method, target)
        headers = forwardable_request_headers(request)
        body = None if method in BODYLESS_METHODS else await request.body()

        try:
            async with httpx.AsyncClient(transport=transport, timeout=timeout, follow_redirects=True) as client:
                origin = await client.request(method, target, headers=headers, content=body)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            details = str(exc) or type(exc).__name__
            logger.error("Relay error for %s: %s", target, details)
            return JSONResponse(
                {"error": "Proxy Error", "details": details, "target": target},
                status_code=GATEWAY_ERROR_STATUS,
            )

        response = Response(content=origin.content, status_code=origin.status_code)
        copy_origin_headers(origin, response)
        logger.info("Success: %s from %s", origin.status_code, target)
        return response

    # Raw ASGI route: matches every method, including non-standard ones.
    app.router.add_route(path, AnyMethodEndpoint(forward), name="relay")
    return app


def ensure_loopback(host: str) -> str:
    """Return ``host`` if it names a loopback interface, else raise ``ValueError``."""
    if host.lower() == "localhost":
        return host
    try:
        address = ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        address = None
    if address is not None and address.is_loopback:
        return host
    raise ValueError(f"Relay must bind to a loopback address, not {host!r}")


def serve_relay(host: str | None = None, port: int | None = None, log_level: str = "info") -> None:
    default_host, default_port = relay_settings()
    bind_host = ensure_loopback(host or default_host)
    uvicorn.run(
        create_relay_app(),
        host=bind_host,
        port=port or default_port,
        log_level=log_level,
    )
