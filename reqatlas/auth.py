import base64
from collections.abc import Iterable
from urllib.parse import urlsplit

from .models import AuthConfig, BasicAuth, BearerAuth, Cookie, Environment, NoAuth, OAuth2Auth
from .variables import resolve_variables


def build_auth_header(auth: AuthConfig, env: Environment | None = None) -> dict[str, str]:
    """Return the ``Authorization`` header for ``auth``, or an empty dict."""
    match auth:
        case BasicAuth(username=username, password=password):
            user = resolve_variables(username, env)
            secret = resolve_variables(password, env)
            encoded = base64.b64encode(f"{user}:{secret}".encode("utf-8")).decode("ascii")
            return {"Authorization": f"Basic {encoded}"}
        case BearerAuth(token=token):
            return {"Authorization": f"Bearer {resolve_variables(token, env)}"}
        case OAuth2Auth(access_token=token):
            return {"Authorization": f"Bearer {resolve_variables(token, env)}"}
        case NoAuth():
            return {}
    raise TypeError(f"Unsupported auth config: {auth!r}")


def cookie_domain(url: str) -> str:
    """Hostname of ``url``, or an empty string when it cannot be parsed."""
    try:
        return urlsplit(url).hostname or ""
    except ValueError:
        return ""


def match_cookies(url: str, cookies: Iterable[Cookie]) -> list[Cookie]:
    # Substring match on the hostname only; path, scheme and expiry are ignored.
    domain = cookie_domain(url)
    return [cookie for cookie in cookies if cookie.domain in domain]


def build_cookie_header(url: str, cookies: Iterable[Cookie]) -> str:
    return "; ".join(f"{cookie.name}={cookie.value}" for cookie in match_cookies(url, cookies))
