"""Output helpers for the armsynth CLI."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel


def _default_serializer(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, set):
        return sorted(value)
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def render(data: Any, fmt: str) -> str:
    if fmt == "json":
        return json.dumps(data, indent=2, default=_default_serializer)
    if fmt == "md":
        return _to_markdown(data)
    if fmt == "table":
        return _to_table(data)
    raise ValueError(f"Unsupported format: {fmt}")


def emit(data: Any, fmt: str, output_path: Path | None = None) -> None:
    rendered = render(data, fmt)
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered + ("\n" if not rendered.endswith("\n") else ""), encoding="utf-8")
    else:
        print(rendered)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (list, tuple, set)):
        return ", ".join(_cell(item) for item in value) or "-"
    return str(value)


def _columns(rows: list[dict[str, Any]]) -> list[str]:
    headers: list[str] = []
    for row in rows:
        for key in row:
            if key not in headers:
                headers.append(key)
    return headers


def _to_markdown(data: Any) -> str:
    if isinstance(data, dict):
        data = [{"key": key, "value": value} for key, value in data.items()]
    if not isinstance(data, list):
        return _cell(data)
    if not data:
        return "_No rows._"
    if not all(isinstance(row, dict) for row in data):
        return "\n".join(f"- {_cell(item)}" for item in data)
    headers = _columns(data)
    lines = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join(" --- " for _ in headers) + "|",
    ]
    lines.extend("| " + " | ".join(_cell(row.get(header)).replace("|", "\\|") for header in headers) + " |" for row in data)
    return "\n".join(lines)


def _to_table(data: Any) -> str:
    if isinstance(data, dict):
        data = [{"key": key, "value": value} for key, value in data.items()]
    if not isinstance(data, list):
        return _cell(data)
    if not data:
        return "(no rows)"
    if not all(isinstance(row, dict) for row in data):
        return "\n".join(_cell(item) for item in data)
    headers = _columns(data)
    cells = [[_cell(row.get(header)) for header in headers] for row in data]
    widths = [max(len(header), *(len(line[index]) for line in cells)) for index, header in enumerate(headers)]
    rendered = [
        "  ".join(header.upper().ljust(width) for header, width in zip(headers, widths)).rstrip(),
        "  ".join("-" * width for width in widths),
    ]
    rendered.extend("  ".join(value.ljust(width) for value, width in zip(line, widths)).rstrip() for line in cells)
    return "\n".join(rendered)


__all__ = ["emit", "render"]
