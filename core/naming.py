"""Fallback resource name generation from construct ids."""

from __future__ import annotations

import re


def generate_fallback_name(
    construct_id: str,
    prefix: str,
    *,
    max_length: int,
    allowed: str = "a-z0-9-",
    separator: str = "-",
) -> str:
    """Derive a resource name such as ``cosdb-appdata`` from a construct id.

    The id is lowercased, characters outside ``allowed`` are removed and the
    result is truncated to ``max_length``. A separator left dangling by the
    truncation is stripped.
    """
    raw = f"{prefix}{separator}{construct_id}" if prefix else construct_id
    cleaned = re.sub(f"[^{allowed}]", "", raw.lower())
    truncated = cleaned[:max_length]
    if separator:
        truncated = truncated.rstrip(separator)
    return truncated


__all__ = ["generate_fallback_name"]
