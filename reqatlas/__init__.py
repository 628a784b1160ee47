"""reqatlas: an API client core with a local cross-origin forwarding relay."""

from .auth import build_auth_header, build_cookie_header, match_cookies
from .dispatcher import prepare_request, send_request
from .http_client import RelayClient, RelayReply
from .models import (
    BasicAuth,
    BearerAuth,
    BodyType,
    Collection,
    ConsoleLog,
    Cookie,
    Environment,
    EnvVariable,
    HttpMethod,
    KeyValue,
    LogType,
    NoAuth,
    OAuth2Auth,
    RequestTemplate,
    RequestType,
    Response,
    RunResult,
    RunSummary,
)
from .relay import create_relay_app
from .runner import RunReport, iter_collection, run_collection, summarize
from .session import ApiSession
from .state import AppState
from .storage import ConfigurationError, export_config, import_config
from .variables import resolve_variables

__all__ = [
    "ApiSession",
    "AppState",
    "BasicAuth",
    "BearerAuth",
    "BodyType",
    "Collection",
    "ConfigurationError",
    "ConsoleLog",
    "Cookie",
    "Environment",
    "EnvVariable",
    "HttpMethod",
    "KeyValue",
    "LogType",
    "NoAuth",
    "OAuth2Auth",
    "RelayClient",
    "RelayReply",
    "RequestTemplate",
    "RequestType",
    "Response",
    "RunReport",
    "RunResult",
    "RunSummary",
    "build_auth_header",
    "build_cookie_header",
    "create_relay_app",
    "export_config",
    "import_config",
    "iter_collection",
    "match_cookies",
    "prepare_request",
    "resolve_variables",
    "run_collection",
    "send_request",
    "summarize",
]

__version__ = "0.1.0"
