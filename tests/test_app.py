# ruff: noqa: S101
import httpx
import pytest
from textual.widgets import DataTable, ProgressBar

from reqatlas.app import CollectionRunnerApp, result_row
from reqatlas.models import Collection, HttpMethod, RequestTemplate, RunResult
from reqatlas.session import ApiSession
from reqatlas.state import AppState


def test_result_row_marks_errors():
    result = RunResult(
        request_id="r",
        name="[odd] name",
        method=HttpMethod.POST,
        status=0,
        status_text="Error",
        time=5,
        success=False,
        error="Connection refused",
    )
    row = result_row(result)
    assert row[1].plain == "[odd] name"
    assert row[4].plain == "ERROR Connection refused"


@pytest.mark.asyncio
async def test_runner_app_shows_results_and_summary(scripted_relay):
    collection = Collection(
        id="c",
        name="Suite",
        requests=(
            RequestTemplate(id="a", name="A", url="https://a.example"),
            RequestTemplate(id="b", name="B", url="https://b.example"),
        ),
    )
    relay = scripted_relay({"https://b.example": httpx.ConnectError("Connection refused")})
    app = CollectionRunnerApp(ApiSession(AppState(collections=(collection,)), relay), collection)

    async with app.run_test() as pilot:
        await app.workers.wait_for_complete()
        await pilot.pause()
        assert app.query_one("#results", DataTable).row_count == 2
        assert app.query_one("#progress", ProgressBar).progress == 100
        assert len(app.results) == 2
        assert app.running is False
