import json
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any, TypeVar

from .models import (
    AuthConfig,
    BasicAuth,
    BearerAuth,
    BodyType,
    Collection,
    Cookie,
    Environment,
    EnvVariable,
    HttpMethod,
    KeyValue,
    NoAuth,
    OAuth2Auth,
    RequestTemplate,
    RequestType,
)
from .state import AppState

APP_DIR_NAME = "reqatlas"
CONFIG_FILE_NAME = "state.json"
SECTIONS = ("collections", "environments", "history", "cookies")

logger = logging.getLogger(__name__)

E = TypeVar("E", HttpMethod, BodyType, RequestType)


class ConfigurationError(ValueError):
    """Raised when an imported configuration does not match the expected shape."""


def _config_dir() -> Path:
    override = os.environ.get("REQATLAS_CONFIG_DIR")
    if override:
        return Path(override)
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def _config_path() -> Path:
    return _config_dir() / CONFIG_FILE_NAME


def load_last_state(default_state: AppState) -> AppState:
    """Load the saved workspace, falling back to ``default_state``."""
    path = _config_path()
    if not path.exists():
        return default_state
    try:
        return import_config(path.read_text(encoding="utf-8"), default_state)
    except (OSError, ConfigurationError) as exc:
        logger.debug("Ignoring saved state at %s: %s", path, exc)
        return default_state


def save_state(state: AppState) -> Path:
    """Persist collections, environments, history and cookies."""
    path = _config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_config(state), encoding="utf-8")
    return path


def load_config_file(path: Path | str, state: AppState) -> AppState:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read configuration file: {exc}") from exc
    return import_config(text, state)


def export_config(state: AppState) -> str:
    payload = {
        "collections": [collection_to_dict(c) for c in state.collections],
        "environments": [environment_to_dict(e) for e in state.environments],
        "history": [request_to_dict(r) for r in state.history],
        "cookies": [cookie_to_dict(c) for c in state.cookies],
    }
    return json.dumps(payload, indent=2)


def import_config(text: str, state: AppState) -> AppState:
    """Apply an exported configuration onto ``state``.

    The whole document is validated before anything is applied; on error
    ``ConfigurationError`` is raised and ``state`` is left as it was.
    Missing top-level sections keep their current values.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid configuration file: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a JSON object.")

    updates: dict[str, Any] = {}
    for section in SECTIONS:
        if data.get(section) is None:
            continue
        items = _require_list(data[section], section)
        parser = _PARSERS[section]
        updates[section] = tuple(parser(item, f"{section}[{index}]") for index, item in enumerate(items))

    new_state = replace(state, **updates)
    if new_state.active_environment is None and new_state.active_environment_id is not None:
        first = new_state.environments[0].id if new_state.environments else None
        new_state = replace(new_state, active_environment_id=first)
    return new_state


def collection_to_dict(collection: Collection) -> dict[str, Any]:
    return {
        "id": collection.id,
        "name": collection.name,
        "requests": [request_to_dict(r) for r in collection.requests],
    }


def environment_to_dict(env: Environment) -> dict[str, Any]:
    return {
        "id": env.id,
        "name": env.name,
        "variables": [{"key": v.key, "value": v.value, "enabled": v.enabled} for v in env.variables],
    }


def cookie_to_dict(cookie: Cookie) -> dict[str, Any]:
    payload = {"name": cookie.name, "value": cookie.value, "domain": cookie.domain, "path": cookie.path}
    if cookie.expires is not None:
        payload["expires"] = cookie.expires
    return payload


def auth_to_dict(auth: AuthConfig) -> dict[str, Any]:
    match auth:
        case BasicAuth():
            return {"type": "basic", "basic": {"username": auth.username, "password": auth.password}}
        case BearerAuth():
            return {"type": "bearer", "bearer": {"token": auth.token}}
        case OAuth2Auth():
            return {"type": "oauth2", "oauth2": {"accessToken": auth.access_token}}
    return {"type": "none"}


def request_to_dict(request: RequestTemplate) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": request.id,
        "name": request.name,
        "method": request.method.value,
        "url": request.url,
        "params": [_key_value_to_dict(kv) for kv in request.params],
        "headers": [_key_value_to_dict(kv) for kv in request.headers],
        "auth": auth_to_dict(request.auth),
        "bodyType": request.body_type.value,
        "body": request.body,
        "requestType": request.request_type.value,
    }
    if request.timestamp is not None:
        payload["timestamp"] = request.timestamp
    return payload


def _key_value_to_dict(kv: KeyValue) -> dict[str, Any]:
    payload: dict[str, Any] = {"key": kv.key, "value": kv.value, "enabled": kv.enabled}
    if kv.description is not None:
        payload["description"] = kv.description
    return payload


def parse_collection(data: Any, where: str) -> Collection:
    obj = _require_dict(data, where)
    requests = _require_list(obj.get("requests", []), f"{where}.requests")
    return Collection(
        id=_require_str(obj, "id", where),
        name=_optional_str(obj, "name", where, default=""),
        requests=tuple(parse_request(r, f"{where}.requests[{i}]") for i, r in enumerate(requests)),
    )


def parse_environment(data: Any, where: str) -> Environment:
    obj = _require_dict(data, where)
    variables = _require_list(obj.get("variables", []), f"{where}.variables")
    parsed = []
    for index, raw in enumerate(variables):
        var = _require_dict(raw, f"{where}.variables[{index}]")
        parsed.append(
            EnvVariable(
                key=_optional_str(var, "key", where),
                value=_optional_str(var, "value", where),
                enabled=bool(var.get("enabled", True)),
            )
        )
    return Environment(id=_require_str(obj, "id", where), name=_optional_str(obj, "name", where), variables=tuple(parsed))


def parse_cookie(data: Any, where: str) -> Cookie:
    obj = _require_dict(data, where)
    expires = obj.get("expires")
    return Cookie(
        name=_require_str(obj, "name", where),
        value=_optional_str(obj, "value", where),
        domain=_optional_str(obj, "domain", where),
        path=_optional_str(obj, "path", where, default="/"),
        expires=str(expires) if expires is not None else None,
    )


def parse_auth(data: Any, where: str) -> AuthConfig:
    if data is None:
        return NoAuth()
    obj = _require_dict(data, where)
    auth_type = obj.get("type", "none")
    if auth_type not in ("none", "basic", "bearer", "oauth2"):
        raise ConfigurationError(f"{where}.type: unknown auth type {auth_type!r}")
    # A type switched in the editor without credentials sends no header.
    if auth_type == "none" or obj.get(auth_type) is None:
        return NoAuth()
    payload = _require_dict(obj.get(auth_type), f"{where}.{auth_type}")
    if auth_type == "basic":
        return BasicAuth(
            username=_optional_str(payload, "username", where),
            password=_optional_str(payload, "password", where),
        )
    if auth_type == "bearer":
        return BearerAuth(token=_optional_str(payload, "token", where))
    return OAuth2Auth(access_token=_optional_str(payload, "accessToken", where))


def parse_request(data: Any, where: str) -> RequestTemplate:
    obj = _require_dict(data, where)
    timestamp = obj.get("timestamp")
    if timestamp is not None and not isinstance(timestamp, int | float):
        raise ConfigurationError(f"{where}.timestamp must be a number")
    return RequestTemplate(
        id=_require_str(obj, "id", where),
        name=_optional_str(obj, "name", where),
        method=_enum(HttpMethod, obj.get("method", "GET"), f"{where}.method"),
        url=_optional_str(obj, "url", where),
        params=_key_values(obj.get("params", []), f"{where}.params"),
        headers=_key_values(obj.get("headers", []), f"{where}.headers"),
        auth=parse_auth(obj.get("auth"), f"{where}.auth"),
        body_type=_enum(BodyType, obj.get("bodyType", "none"), f"{where}.bodyType"),
        body=_optional_str(obj, "body", where),
        request_type=_enum(RequestType, obj.get("requestType") or "http", f"{where}.requestType"),
        timestamp=int(timestamp) if timestamp is not None else None,
    )


def _key_values(data: Any, where: str) -> tuple[KeyValue, ...]:
    rows = []
    for index, raw in enumerate(_require_list(data, where)):
        row = _require_dict(raw, f"{where}[{index}]")
        description = row.get("description")
        rows.append(
            KeyValue(
                key=_optional_str(row, "key", where),
                value=_optional_str(row, "value", where),
                enabled=bool(row.get("enabled", True)),
                description=str(description) if description is not None else None,
            )
        )
    return tuple(rows)


def _enum(enum_type: type[E], value: Any, where: str) -> E:
    try:
        return enum_type(value)
    except ValueError as exc:
        raise ConfigurationError(f"{where}: unexpected value {value!r}") from exc


def _require_dict(data: Any, where: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigurationError(f"{where} must be an object")
    return data


def _require_list(data: Any, where: str) -> list[Any]:
    if not isinstance(data, list):
        raise ConfigurationError(f"{where} must be an array")
    return data


def _require_str(obj: dict[str, Any], key: str, where: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{where}.{key} must be a non-empty string")
    return value


def _optional_str(obj: dict[str, Any], key: str, where: str, default: str = "") -> str:
    value = obj.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ConfigurationError(f"{where}.{key} must be a string")
    return value


_PARSERS = {
    "collections": parse_collection,
    "environments": parse_environment,
    "history": parse_request,
    "cookies": parse_cookie,
}
