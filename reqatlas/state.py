"""Immutable application state and the update operations over it.

Every update returns a new ``AppState``; nothing is mutated in place, so a
reader holding an old value always sees a consistent snapshot.
"""

import time
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping

from .config import HISTORY_LIMIT, LOG_LIMIT
from .logsink import append_log, push_log
from .models import Collection, ConsoleLog, Cookie, Environment, LogType, RequestTemplate, Response


def _empty_mapping() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True)
class AppState:
    collections: tuple[Collection, ...] = ()
    environments: tuple[Environment, ...] = ()
    active_environment_id: str | None = None
    history: tuple[RequestTemplate, ...] = ()
    cookies: tuple[Cookie, ...] = ()
    responses: Mapping[str, Response] = field(default_factory=_empty_mapping)
    blobs: Mapping[str, bytes] = field(default_factory=_empty_mapping)
    logs: tuple[ConsoleLog, ...] = ()

    @property
    def active_environment(self) -> Environment | None:
        if self.active_environment_id is None:
            return None
        for env in self.environments:
            if env.id == self.active_environment_id:
                return env
        return None

    def find_request(self, request_id: str) -> RequestTemplate | None:
        for collection in self.collections:
            for request in collection.requests:
                if request.id == request_id:
                    return request
        for request in self.history:
            if request.id == request_id:
                return request
        return None

    def find_collection(self, collection_id: str) -> Collection | None:
        return next((c for c in self.collections if c.id == collection_id), None)

    def with_active_environment(self, environment_id: str | None) -> "AppState":
        if environment_id is not None and all(env.id != environment_id for env in self.environments):
            raise KeyError(environment_id)
        return replace(self, active_environment_id=environment_id)

    def with_log(self, log_type: LogType | str, message: str, details: Any = None) -> "AppState":
        return replace(self, logs=append_log(self.logs, log_type, message, details, limit=LOG_LIMIT))

    def with_logs(self, entries: tuple[ConsoleLog, ...]) -> "AppState":
        """Insert already-built entries, oldest first, enforcing the cap on each insert."""
        logs = self.logs
        for entry in entries:
            logs = push_log(logs, entry, limit=LOG_LIMIT)
        return replace(self, logs=logs)

    def with_history(self, request: RequestTemplate) -> "AppState":
        return replace(self, history=promote_history(self.history, request))

    def with_response(self, request_id: str, response: Response, blob: bytes | None = None) -> "AppState":
        blobs = dict(self.blobs)
        previous = self.responses.get(request_id)
        if previous is not None and previous.is_image:
            blobs.pop(previous.data, None)
        if blob is not None and response.is_image:
            blobs[response.data] = blob
        responses = dict(self.responses)
        responses[request_id] = response
        return replace(self, responses=MappingProxyType(responses), blobs=MappingProxyType(blobs))


def promote_history(
    history: tuple[RequestTemplate, ...], request: RequestTemplate, *, limit: int = HISTORY_LIMIT
) -> tuple[RequestTemplate, ...]:
    """Move ``request`` to the front of ``history``, stamping new entries."""
    if any(entry.id == request.id for entry in history):
        rest = tuple(entry for entry in history if entry.id != request.id)
        return (request, *rest)[:limit]
    stamped = replace(request, timestamp=int(time.time() * 1000))
    return (stamped, *history)[:limit]
