import os

from .models import (
    Collection,
    Environment,
    EnvVariable,
    HttpMethod,
    KeyValue,
    RequestTemplate,
    RequestType,
)

DEFAULT_RELAY_HOST = "127.0.0.1"
DEFAULT_RELAY_PORT = 3001
RELAY_PATH = "/proxy"
TARGET_URL_HEADER = "x-target-url"
GATEWAY_ERROR_STATUS = 502
OUTBOUND_TIMEOUT = 30.0

HISTORY_LIMIT = 50
LOG_LIMIT = 100

# Headers owned by the relay's own transport on the inbound leg.
INBOUND_SKIP_HEADERS = frozenset({"host", "connection", "content-length", TARGET_URL_HEADER})
# Headers invalidated by re-encoding the origin payload on the way back.
OUTBOUND_SKIP_HEADERS = frozenset(
    {"content-length", "content-encoding", "transfer-encoding", "connection", "keep-alive"}
)

DEFAULT_REQUEST = RequestTemplate(
    id="req_1",
    name="New Request",
    method=HttpMethod.GET,
    url="{{baseUrl}}/users/octocat",
    params=(KeyValue(key="", value=""),),
    headers=(KeyValue(key="Content-Type", value="application/json"),),
    request_type=RequestType.HTTP,
)

DEFAULT_COLLECTION = Collection(id="col_1", name="My APIs", requests=(DEFAULT_REQUEST,))

DEFAULT_ENVIRONMENT = Environment(
    id="env_1",
    name="Production",
    variables=(EnvVariable(key="baseUrl", value="https://api.github.com"),),
)


def relay_settings() -> tuple[str, int]:
    """Return the relay host and port, honouring environment overrides."""
    host = os.environ.get("REQATLAS_RELAY_HOST") or DEFAULT_RELAY_HOST
    raw_port = os.environ.get("REQATLAS_RELAY_PORT")
    try:
        port = int(raw_port) if raw_port else DEFAULT_RELAY_PORT
    except ValueError:
        port = DEFAULT_RELAY_PORT
    return host, port


def relay_url(host: str | None = None, port: int | None = None) -> str:
    default_host, default_port = relay_settings()
    return f"http://{host or default_host}:{port or default_port}{RELAY_PATH}"
