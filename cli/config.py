"""Configuration loader for the armsynth CLI."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

DEFAULTS = {
    "project_name": "armsynth",
    "outdir": "arm.out",
    "default_format": "table",
    "strict": False,
    "skip_validation": False,
    "max_resources_per_template": None,
}


@dataclass(slots=True)
class Settings:
    project_name: str = DEFAULTS["project_name"]
    outdir: str = DEFAULTS["outdir"]
    default_format: str = DEFAULTS["default_format"]
    strict: bool = DEFAULTS["strict"]
    skip_validation: bool = DEFAULTS["skip_validation"]
    max_resources_per_template: int | None = DEFAULTS["max_resources_per_template"]
    context: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "Settings":
        max_resources = data.get("max_resources_per_template", DEFAULTS["max_resources_per_template"])
        context = data.get("context") or {}
        if not isinstance(context, dict):
            raise ValueError("'context' must be a mapping of keys to values.")
        return cls(
            project_name=data.get("project_name", DEFAULTS["project_name"]),
            outdir=str(data.get("outdir", DEFAULTS["outdir"])),
            default_format=data.get("default_format", DEFAULTS["default_format"]),
            strict=bool(data.get("strict", DEFAULTS["strict"])),
            skip_validation=bool(data.get("skip_validation", DEFAULTS["skip_validation"])),
            max_resources_per_template=int(max_resources) if max_resources is not None else None,
            context=dict(context),
        )

    def merge_cli(
        self,
        format_override: str | None = None,
        outdir: str | None = None,
        strict: bool | None = None,
        skip_validation: bool | None = None,
        max_resources_per_template: int | None = None,
    ) -> "Settings":
        return replace(
            self,
            default_format=format_override or self.default_format,
            outdir=outdir or self.outdir,
            strict=self.strict if strict is None else strict,
            skip_validation=self.skip_validation if skip_validation is None else skip_validation,
            max_resources_per_template=max_resources_per_template or self.max_resources_per_template,
            context=dict(self.context),
        )


def load_settings(path: Path) -> Settings:
    if not path.exists():
        return Settings()

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    if not isinstance(data, dict):
        raise ValueError("Configuration file must be a mapping of keys to values.")

    return Settings.from_mapping(data)


__all__ = ["Settings", "load_settings"]
