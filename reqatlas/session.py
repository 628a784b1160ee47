import logging
from typing import Any

from .dispatcher import send_request
from .http_client import RelayClient
from .models import Collection, LogType, RequestTemplate, Response
from .runner import ProgressCallback, RunReport, run_collection
from .state import AppState
from .storage import export_config, import_config
from .variables import resolve_variables

logger = logging.getLogger(__name__)


class ApiSession:
    """Caller-facing entry point holding the current ``AppState``.

    Each operation computes a new state from the previous one and swaps it
    in once the operation has finished.
    """

    def __init__(self, state: AppState | None = None, relay: RelayClient | None = None) -> None:
        self.state = state or AppState()
        self.relay = relay or RelayClient()

    def resolve_variables(self, text: str) -> str:
        return resolve_variables(text, self.state.active_environment)

    def select_environment(self, environment_id: str | None) -> None:
        self.state = self.state.with_active_environment(environment_id)

    def find_request(self, request_id: str) -> RequestTemplate | None:
        return self.state.find_request(request_id)

    def append_log(self, log_type: LogType | str, message: str, details: Any = None) -> None:
        self.state = self.state.with_log(log_type, message, details)

    async def send_request(self, request: RequestTemplate) -> Response:
        self.state, response = await send_request(self.state, request, self.relay)
        return response

    async def run_collection(
        self, collection: Collection, on_progress: ProgressCallback | None = None
    ) -> RunReport:
        snapshot = self.state
        return await run_collection(
            collection, snapshot.active_environment, snapshot.cookies, self.relay, on_progress=on_progress
        )

    def export_config(self) -> str:
        return export_config(self.state)

    def import_config(self, text: str) -> None:
        try:
            self.state = import_config(text, self.state)
        except ValueError:
            self.append_log(LogType.ERROR, "Failed to load configuration")
            raise
        self.append_log(LogType.INFO, "Configuration loaded successfully")
