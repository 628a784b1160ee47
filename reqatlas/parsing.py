import json

from .models import Response, RunResult, RunSummary


def format_response(response: Response) -> str:
    if response.is_image:
        body = f"<image {response.data}>"
    elif isinstance(response.data, str):
        body = response.data
    else:
        body = json.dumps(response.data, indent=2, ensure_ascii=False)
    status = f"{response.status} {response.status_text}".strip()
    return f"Status: {status}\nTime: {response.time} ms\nSize: {response.size}\nBody:\n{body}"


def format_run_result(result: RunResult) -> str:
    mark = "PASS" if result.success else ("ERROR" if result.status == 0 else "FAIL")
    line = f"[{mark}] {result.method.value:<7} {result.name} -> {result.status} {result.status_text} ({result.time} ms)"
    if result.error:
        line += f"\n        {result.error}"
    return line


def format_summary(summary: RunSummary) -> str:
    return (
        f"Total: {summary.total}  Passed: {summary.passed}  Failed: {summary.failed}  "
        f"Errors: {summary.errors}  Avg: {summary.avg_time} ms"
    )
