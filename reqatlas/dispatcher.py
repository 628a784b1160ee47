import asyncio
import json
import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

from .auth import build_auth_header, build_cookie_header
from .http_client import RelayClient, RelayReply
from .logsink import make_log
from .models import (
    BodyType,
    ConsoleLog,
    Cookie,
    Environment,
    HttpMethod,
    LogType,
    RequestTemplate,
    RequestType,
    Response,
)
from .state import AppState
from .variables import resolve_variables

logger = logging.getLogger(__name__)

BODYLESS_METHODS = frozenset({HttpMethod.GET, HttpMethod.HEAD})
BLOB_SCHEME = "blob:reqatlas/"


@dataclass(frozen=True)
class PreparedRequest:
    """A request template after resolution, ready for the relay."""

    method: HttpMethod
    url: str
    headers: dict[str, str]
    body: bytes | None
    cookie_header: str


def effective_method(request: RequestTemplate) -> HttpMethod:
    if request.request_type is RequestType.WEBSOCKET:
        raise ValueError("WebSocket requests cannot be sent through the relay.")
    if request.request_type is RequestType.GRAPHQL:
        return HttpMethod.POST
    return HttpMethod(request.method)


def build_url(request: RequestTemplate, env: Environment | None) -> str:
    url = resolve_variables(request.url, env)
    query = [(p.key, resolve_variables(p.value, env)) for p in request.params if p.enabled and p.key]
    if not query:
        return url
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{urlencode(query)}"


def prepare_request(
    request: RequestTemplate, env: Environment | None, cookies: Iterable[Cookie]
) -> PreparedRequest:
    """Resolve URL, headers, auth, cookies and body for one request."""
    method = effective_method(request)
    url = build_url(request, env)
    cookie_header = build_cookie_header(url, cookies)

    headers: dict[str, str] = {}
    for header in request.headers:
        if header.enabled and header.key:
            headers[header.key] = resolve_variables(header.value, env)
    headers.update(build_auth_header(request.auth, env))
    if cookie_header:
        headers["Cookie"] = cookie_header

    body = None
    if method not in BODYLESS_METHODS and request.body_type is not BodyType.NONE:
        body = resolve_variables(request.body, env).encode("utf-8")
    return PreparedRequest(method=method, url=url, headers=headers, body=body, cookie_header=cookie_header)


def classify_payload(reply: RelayReply) -> tuple[Any, bool]:
    """Return ``(data, is_image)`` for a relay reply.

    Images become a blob reference; anything else is parsed as JSON and
    falls back to the raw text.
    """
    content_type = reply.headers.get("content-type", "")
    if "image/" in content_type:
        return f"{BLOB_SCHEME}{uuid.uuid4()}", True
    try:
        text = reply.content.decode(_charset(content_type), errors="replace")
    except UnicodeError:
        # Some codecs (idna) reject arbitrary payloads even with errors="replace".
        text = reply.content.decode("utf-8", errors="replace")
    try:
        return json.loads(text), False
    except ValueError:
        return text, False


def _charset(content_type: str) -> str:
    for part in content_type.split(";")[1:]:
        key, _, value = part.strip().partition("=")
        if key.lower() == "charset" and value:
            charset = value.strip('"')
            try:
                "".encode(charset)
            except LookupError:
                break
            return charset
    return "utf-8"


def format_size(data: Any) -> str:
    serialized = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    return f"{len(serialized) / 1024:.2f} KB"


def error_response(message: str, elapsed: int) -> Response:
    return Response(
        status=0,
        status_text="Error",
        time=elapsed,
        size="0 KB",
        headers={},
        data={"error": message or "Failed to fetch"},
    )


async def send_request(
    state: AppState, request: RequestTemplate, relay: RelayClient
) -> tuple[AppState, Response]:
    """Dispatch one request and return the updated state with its response.

    History, logs and the response map change only after the call completes.
    Transport failures never escape; they produce a status-0 response.
    """
    loop = asyncio.get_running_loop()
    start = loop.time()
    env = state.active_environment
    entries: list[ConsoleLog] = []
    blob: bytes | None = None

    try:
        prepared = prepare_request(request, env, state.cookies)
        entries.append(
            make_log(
                LogType.REQUEST,
                f"Sending {prepared.method.value} to {prepared.url}",
                {"headers": dict(prepared.headers), "cookies": prepared.cookie_header},
            )
        )
        logger.debug("Sending %s %s via %s", prepared.method.value, prepared.url, relay.base_url)
        reply = await relay.forward(prepared.method.value, prepared.url, prepared.headers, prepared.body)
        data, is_image = classify_payload(reply)
        if is_image:
            blob = reply.content
        elapsed = _elapsed_ms(loop.time() - start)
        response = Response(
            status=reply.status,
            status_text=reply.status_text,
            time=elapsed,
            size=format_size(data),
            headers=dict(reply.headers),
            data=data,
            is_image=is_image,
        )
        entries.append(
            make_log(
                LogType.RESPONSE,
                f"Received response from {prepared.url}",
                {"status": reply.status, "time": elapsed, "headers": response.headers},
            )
        )
    except Exception as exc:
        elapsed = _elapsed_ms(loop.time() - start)
        message = str(exc) or type(exc).__name__
        logger.debug("Request %s failed: %s", request.id, message, exc_info=True)
        entries.append(make_log(LogType.ERROR, f"Request failed: {message}", {"exception": type(exc).__name__}))
        response = error_response(message, elapsed)

    new_state = (
        state.with_history(request)
        .with_logs(tuple(entries))
        .with_response(request.id, response, blob)
    )
    return new_state, response


def _elapsed_ms(seconds: float) -> int:
    return int(seconds * 1000)
