from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, ProgressBar, Static

from .models import Collection, RunResult
from .parsing import format_summary
from .runner import RunProgress, summarize
from .session import ApiSession

RESULT_COLUMNS = ("Method", "Name", "Status", "Time", "Result")


def result_row(result: RunResult) -> tuple[Text, ...]:
    if result.success:
        outcome = Text("PASS", style="green")
    elif result.status == 0:
        outcome = Text.assemble(("ERROR", "red"), " ", result.error or "")
    else:
        outcome = Text("FAIL", style="yellow")
    status = f"{result.status} {result.status_text}".strip()
    return (Text(result.method.value), Text(result.name), Text(status), Text(f"{result.time} ms"), outcome)


class CollectionRunnerApp(App[None]):
    """Runs one collection and shows per-request results as they arrive."""

    CSS = """
    Screen {
        background: #0b1221;
    }

    #main {
        height: 1fr;
        padding: 0 1;
    }

    .label {
        color: #8fb2ff;
        text-style: bold;
    }

    .status {
        color: #87d7ff;
        padding: 0 1;
    }

    #results {
        height: 1fr;
        border: round #22345b;
    }
    """

    BINDINGS = [
        Binding("r", "run", "Run again"),
        Binding("q", "quit", "Quit"),
        Binding("f12", "quit", "Quit"),
    ]

    running: reactive[bool] = reactive(False)

    def __init__(self, session: ApiSession, collection: Collection) -> None:
        super().__init__()
        self.session = session
        self.collection = collection
        self.results: list[RunResult] = []

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Container(id="main"):
            yield Static(Text(f"Runner: {self.collection.name}"), classes="label")
            yield ProgressBar(total=100, show_eta=False, id="progress")
            yield DataTable(id="results", zebra_stripes=True)
            yield Static("", id="summary", classes="status")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#results", DataTable).add_columns(*RESULT_COLUMNS)
        self.action_run()

    def action_run(self) -> None:
        if self.running:
            return
        self.run_worker(self._run(), exclusive=True, group="runner")

    async def _run(self) -> None:
        self.running = True
        self.results = []
        self.query_one("#results", DataTable).clear()
        self.query_one("#progress", ProgressBar).update(progress=0)
        self._set_summary("Running...")
        try:
            report = await self.session.run_collection(self.collection, on_progress=self._on_progress)
        finally:
            self.running = False
        self._set_summary(format_summary(report.summary))

    def _on_progress(self, progress: RunProgress) -> None:
        self.results.append(progress.result)
        self.query_one("#results", DataTable).add_row(*result_row(progress.result))
        self.query_one("#progress", ProgressBar).update(progress=progress.percent)
        self._set_summary(format_summary(summarize(self.results, total=progress.total)))

    def _set_summary(self, message: str) -> None:
        self.query_one("#summary", Static).update(message)
