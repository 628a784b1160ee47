import sys
from pathlib import Path

import httpx
import pytest

# Ensure pytest-asyncio plugin is loaded so @pytest.mark.asyncio works with pytest>=9.
pytest_plugins = ["pytest_asyncio"]


# Ensure project root is on sys.path for local test runs without installation.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from reqatlas.http_client import RelayClient, RelayReply  # noqa: E402
from reqatlas.relay import create_relay_app  # noqa: E402


@pytest.fixture
def tmp_config_dir(tmp_path, monkeypatch):
    cfg = tmp_path / "config"
    cfg.mkdir()
    monkeypatch.setenv("REQATLAS_CONFIG_DIR", str(cfg))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    return cfg


class FakeOrigin:
    """Stands in for the real origin behind the relay."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.bodies: list[bytes] = []
        self.response = httpx.Response(200, json={"ok": True})
        self.unreachable: set[str] = set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.host in self.unreachable:
            raise httpx.ConnectError("Name or service not known", request=request)
        self.requests.append(request)
        self.bodies.append(request.read())
        return self.response


@pytest.fixture
def origin():
    return FakeOrigin()


@pytest.fixture
def relay_app(origin):
    return create_relay_app(transport=httpx.MockTransport(origin))


@pytest.fixture
def relay_client(relay_app):
    return RelayClient("http://relay.test/proxy", transport=httpx.ASGITransport(app=relay_app))


class ScriptedRelay(RelayClient):
    """Relay client whose replies are scripted per target URL."""

    def __init__(self, replies: dict[str, int | Exception]) -> None:
        super().__init__("http://127.0.0.1:3001/proxy")
        self.replies = replies
        self.calls: list[tuple[str, str, dict[str, str], bytes | None]] = []

    async def forward(self, method, target_url, headers, body=None):
        self.calls.append((method, target_url, dict(headers), body))
        reply = self.replies.get(target_url, 200)
        if isinstance(reply, Exception):
            raise reply
        return RelayReply(status=reply, status_text="OK" if reply < 300 else "Not OK", headers={})


@pytest.fixture
def scripted_relay():
    return ScriptedRelay
