# ruff: noqa: S101
import json

import httpx
import pytest

from reqatlas.config import DEFAULT_COLLECTION, DEFAULT_ENVIRONMENT
from reqatlas.models import LogType
from reqatlas.session import ApiSession
from reqatlas.state import AppState
from reqatlas.storage import ConfigurationError


def _session(relay) -> ApiSession:
    state = AppState(
        collections=(DEFAULT_COLLECTION,),
        environments=(DEFAULT_ENVIRONMENT,),
        active_environment_id=DEFAULT_ENVIRONMENT.id,
    )
    return ApiSession(state, relay)


def test_resolve_variables_uses_active_environment(scripted_relay):
    session = _session(scripted_relay({}))
    assert session.resolve_variables("{{baseUrl}}/x") == "https://api.github.com/x"

    session.select_environment(None)
    assert session.resolve_variables("{{baseUrl}}/x") == "{{baseUrl}}/x"


@pytest.mark.asyncio
async def test_send_request_updates_session_state(relay_client, origin):
    origin.response = httpx.Response(200, json={"login": "octocat"})
    session = _session(relay_client)
    request = session.find_request("req_1")

    response = await session.send_request(request)

    assert response.data == {"login": "octocat"}
    assert session.state.responses["req_1"] is response
    assert session.state.history[0].id == "req_1"
    assert str(origin.requests[0].url) == "https://api.github.com/users/octocat"


@pytest.mark.asyncio
async def test_run_collection_leaves_history_untouched(scripted_relay):
    session = _session(scripted_relay({}))

    report = await session.run_collection(DEFAULT_COLLECTION)

    assert report.summary.passed == 1
    assert session.state.history == ()
    assert session.state.responses == {}


def test_import_config_logs_outcome(scripted_relay):
    session = _session(scripted_relay({}))
    session.import_config(json.dumps({"cookies": [{"name": "a", "value": "1", "domain": "x"}]}))
    assert session.state.logs[0].type is LogType.INFO
    assert len(session.state.cookies) == 1

    before = session.state.collections
    with pytest.raises(ConfigurationError):
        session.import_config("{broken")
    assert session.state.collections == before
    assert session.state.logs[0].type is LogType.ERROR


def test_append_log_and_export(scripted_relay):
    session = _session(scripted_relay({}))
    session.append_log("info", "hello")
    assert session.state.logs[0].message == "hello"
    assert set(json.loads(session.export_config())) == {"collections", "environments", "history", "cookies"}
