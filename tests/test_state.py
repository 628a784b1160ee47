# ruff: noqa: S101
import pytest

from reqatlas.logsink import append_log
from reqatlas.models import Collection, Environment, LogType, RequestTemplate, Response
from reqatlas.state import AppState, promote_history


def _req(request_id: str) -> RequestTemplate:
    return RequestTemplate(id=request_id, name=request_id, url=f"https://example.com/{request_id}")


def test_log_sink_keeps_most_recent_hundred():
    logs = ()
    for index in range(150):
        logs = append_log(logs, LogType.INFO, f"message {index}")

    assert len(logs) == 100
    assert [log.message for log in logs] == [f"message {index}" for index in range(149, 49, -1)]


def test_with_log_accepts_string_types():
    state = AppState().with_log("error", "boom", {"code": 1})
    assert state.logs[0].type is LogType.ERROR
    assert state.logs[0].details == {"code": 1}


def test_history_is_capped_at_fifty():
    history = ()
    for index in range(60):
        history = promote_history(history, _req(f"r{index}"))

    assert len(history) == 50
    assert history[0].id == "r59"
    assert history[-1].id == "r10"


def test_history_promotes_existing_entry_without_duplicate():
    history = promote_history((), _req("a"))
    history = promote_history(history, _req("b"))
    history = promote_history(history, _req("a"))

    assert [entry.id for entry in history] == ["a", "b"]


def test_active_environment_lookup_and_selection():
    env = Environment(id="env_1", name="Prod")
    state = AppState(environments=(env,))
    assert state.active_environment is None

    selected = state.with_active_environment("env_1")
    assert selected.active_environment == env
    assert state.active_environment_id is None

    with pytest.raises(KeyError):
        state.with_active_environment("missing")


def test_with_response_overwrites_without_mutating_previous_state():
    response = Response(status=200, status_text="OK", time=1, size="0.01 KB", headers={}, data="x")
    first = AppState().with_response("req", response)
    second = first.with_response("req", Response(status=404, status_text="Not Found", time=1, size="", headers={}, data=""))

    assert first.responses["req"].status == 200
    assert second.responses["req"].status == 404
    with pytest.raises(TypeError):
        second.responses["other"] = response  # type: ignore[index]


def test_find_request_searches_collections_then_history():
    state = AppState(collections=(Collection(id="c", name="C", requests=(_req("a"),)),), history=(_req("h"),))
    assert state.find_request("a").id == "a"
    assert state.find_request("h").id == "h"
    assert state.find_request("zzz") is None
