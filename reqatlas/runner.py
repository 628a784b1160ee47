"""Sequential collection runner.

Requests run one after another in collection order. A failing request is
recorded and the run moves on; there is no cancellation once started.
"""

import asyncio
import logging
import math
from collections.abc import AsyncIterator, Callable, Iterable, Sequence
from dataclasses import dataclass

from .dispatcher import effective_method, prepare_request
from .http_client import RelayClient
from .models import Collection, Cookie, Environment, HttpMethod, RequestTemplate, RunResult, RunSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunProgress:
    result: RunResult
    completed: int
    total: int

    @property
    def percent(self) -> float:
        return (self.completed / self.total) * 100 if self.total else 100.0


@dataclass(frozen=True)
class RunReport:
    results: tuple[RunResult, ...]
    summary: RunSummary


ProgressCallback = Callable[[RunProgress], None]


def reported_method(request: RequestTemplate) -> HttpMethod:
    try:
        return effective_method(request)
    except ValueError:
        return HttpMethod(request.method)


async def run_one(
    request: RequestTemplate, env: Environment | None, cookies: Iterable[Cookie], relay: RelayClient
) -> RunResult:
    loop = asyncio.get_running_loop()
    start = loop.time()
    try:
        prepared = prepare_request(request, env, cookies)
        reply = await relay.forward(prepared.method.value, prepared.url, prepared.headers, prepared.body)
    except Exception as exc:
        message = str(exc) or "Failed"
        logger.debug("Run request %s failed: %s", request.id, message)
        return RunResult(
            request_id=request.id,
            name=request.name,
            method=reported_method(request),
            status=0,
            status_text="Error",
            time=int((loop.time() - start) * 1000),
            success=False,
            error=message,
        )
    return RunResult(
        request_id=request.id,
        name=request.name,
        method=prepared.method,
        status=reply.status,
        status_text=reply.status_text,
        time=int((loop.time() - start) * 1000),
        success=200 <= reply.status < 300,
    )


async def iter_collection(
    collection: Collection, env: Environment | None, cookies: Iterable[Cookie], relay: RelayClient
) -> AsyncIterator[RunProgress]:
    """Yield one ``RunProgress`` per request, strictly in order."""
    cookies = tuple(cookies)
    total = len(collection.requests)
    logger.info("Running collection %s (%d requests)", collection.name, total)
    for index, request in enumerate(collection.requests, start=1):
        result = await run_one(request, env, cookies, relay)
        yield RunProgress(result=result, completed=index, total=total)


async def run_collection(
    collection: Collection,
    env: Environment | None,
    cookies: Iterable[Cookie],
    relay: RelayClient,
    on_progress: ProgressCallback | None = None,
) -> RunReport:
    results: list[RunResult] = []
    async for progress in iter_collection(collection, env, cookies, relay):
        results.append(progress.result)
        if on_progress is not None:
            on_progress(progress)
    summary = summarize(results, total=len(collection.requests))
    logger.info(
        "Collection %s finished: %d passed, %d failed, %d errors",
        collection.name,
        summary.passed,
        summary.failed,
        summary.errors,
    )
    return RunReport(results=tuple(results), summary=summary)


def summarize(results: Sequence[RunResult], total: int | None = None) -> RunSummary:
    completed = len(results)
    # Halves round up.
    avg = math.floor(sum(r.time for r in results) / completed + 0.5) if completed else 0
    return RunSummary(
        total=completed if total is None else total,
        passed=sum(1 for r in results if r.success),
        failed=sum(1 for r in results if not r.success and r.status != 0),
        errors=sum(1 for r in results if r.status == 0),
        avg_time=int(avg),
    )
