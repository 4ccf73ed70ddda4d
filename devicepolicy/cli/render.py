from __future__ import annotations

import json
import sys
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .results import CommandResult


def _error_title(error_type: str) -> str:
    mapping = {
        "usage_error": "Usage error",
        "write_not_allowed": "Write blocked",
        "decode_error": "Unexpected response",
        "internal_error": "Internal error",
        "AuthenticationError": "Authentication error",
        "AuthorizationError": "Permission denied",
        "NotFoundError": "Not found",
        "RateLimitError": "Rate limited",
        "ServerError": "Server error",
        "NetworkError": "Network error",
        "RequestTimeoutError": "Timeout",
        "APIError": "API error",
    }
    return mapping.get((error_type or "").strip(), "Error")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _rows_table(title: str, rows: list[dict[str, Any]]) -> Table:
    columns: list[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    table = Table(title=title, show_header=True, header_style="bold")
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*[_cell(row.get(col)) for col in columns])
    return table


def _record_table(title: str, record: dict[str, Any]) -> Table:
    table = Table(title=title, show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    for key, value in record.items():
        table.add_row(key, _cell(value))
    return table


def render_result(result: CommandResult, *, quiet: bool, verbosity: int) -> None:
    stdout = Console(file=sys.stdout)
    stderr = Console(file=sys.stderr, force_terminal=False)

    if not result.ok:
        error = result.error
        if error is None:  # pragma: no cover
            stderr.print("Error")
            return
        stderr.print(f"{_error_title(error.type)}: {error.message}")
        if quiet:
            return
        if error.hint:
            stderr.print(f"Hint: {error.hint}")
        if error.details and verbosity >= 1:
            stderr.print(Panel.fit(Text(json.dumps(error.details, ensure_ascii=False, indent=2))))
        return

    data = result.data
    if not isinstance(data, dict):
        if data is not None:
            stdout.print(_cell(data))
        return

    for key, value in data.items():
        if isinstance(value, list) and all(isinstance(v, dict) for v in value):
            if not value:
                stdout.print(f"{key}: (none)")
                continue
            stdout.print(_rows_table(key, value))
        elif isinstance(value, dict):
            stdout.print(_record_table(key, value))
        else:
            stdout.print(f"{key}: {_cell(value)}")

    pagination = result.meta.pagination
    if pagination and not quiet:
        info = pagination.get("resultInfo", {})
        stderr.print(
            f"page {info.get('page', '?')}/{info.get('totalPages', '?')}"
            f" ({info.get('totalCount', '?')} total)"
        )
