from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class RequestType(str, Enum):
    HTTP = "http"
    GRAPHQL = "graphql"
    WEBSOCKET = "websocket"


class BodyType(str, Enum):
    NONE = "none"
    JSON = "json"
    FORM_DATA = "form-data"


class LogType(str, Enum):
    INFO = "info"
    ERROR = "error"
    REQUEST = "request"
    RESPONSE = "response"


@dataclass(frozen=True)
class KeyValue:
    key: str
    value: str
    enabled: bool = True
    description: str | None = None


@dataclass(frozen=True)
class EnvVariable:
    key: str
    value: str
    enabled: bool = True


@dataclass(frozen=True)
class Environment:
    id: str
    name: str
    variables: tuple[EnvVariable, ...] = ()


@dataclass(frozen=True)
class NoAuth:
    type = "none"


@dataclass(frozen=True)
class BasicAuth:
    username: str
    password: str
    type = "basic"


@dataclass(frozen=True)
class BearerAuth:
    token: str
    type = "bearer"


@dataclass(frozen=True)
class OAuth2Auth:
    access_token: str
    type = "oauth2"


AuthConfig = NoAuth | BasicAuth | BearerAuth | OAuth2Auth


@dataclass(frozen=True)
class RequestTemplate:
    id: str
    name: str
    url: str
    method: HttpMethod = HttpMethod.GET
    params: tuple[KeyValue, ...] = ()
    headers: tuple[KeyValue, ...] = ()
    auth: AuthConfig = field(default_factory=NoAuth)
    body_type: BodyType = BodyType.NONE
    body: str = ""
    request_type: RequestType = RequestType.HTTP
    timestamp: int | None = None


@dataclass(frozen=True)
class Collection:
    id: str
    name: str
    requests: tuple[RequestTemplate, ...] = ()


@dataclass(frozen=True)
class Cookie:
    name: str
    value: str
    domain: str
    path: str = "/"
    expires: str | None = None


@dataclass(frozen=True)
class Response:
    status: int
    status_text: str
    time: int
    size: str
    headers: dict[str, str]
    data: Any
    is_image: bool = False


@dataclass(frozen=True)
class RunResult:
    request_id: str
    name: str
    method: HttpMethod
    status: int
    status_text: str
    time: int
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class RunSummary:
    total: int
    passed: int
    failed: int
    errors: int
    avg_time: int


@dataclass(frozen=True)
class ConsoleLog:
    id: str
    timestamp: int
    type: LogType
    message: str
    details: Any = None
