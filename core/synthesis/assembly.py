"""Synthesized output: templates plus manifest, and writing them to disk."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from core.constants import MANIFEST_FILE
from core.models import ArmTemplate, AssemblyManifest

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CloudAssembly:
    templates: Dict[str, ArmTemplate] = field(default_factory=dict)
    manifest: AssemblyManifest = field(default_factory=AssemblyManifest)

    def get_template(self, name: str) -> Dict[str, Any]:
        if name not in self.templates:
            raise KeyError(f"No template named '{name}' in assembly")
        return self.templates[name].to_dict()

    def template_names(self) -> List[str]:
        return list(self.templates)

    def summary(self) -> List[Dict[str, Any]]:
        return [
            {
                "template": artifact.name,
                "stack": artifact.stack,
                "scope": artifact.scope,
                "resources": artifact.resource_count,
                "dependsOn": list(artifact.depends_on),
            }
            for artifact in self.manifest.artifacts
        ]

    def write(self, outdir: Path) -> List[Path]:
        outdir.mkdir(parents=True, exist_ok=True)
        written: List[Path] = []
        for artifact in self.manifest.artifacts:
            path = outdir / artifact.file
            _write_json(path, self.templates[artifact.name].to_dict())
            logger.info("Wrote template %s", path)
            written.append(path)
        manifest_path = outdir / MANIFEST_FILE
        _write_json(manifest_path, self.manifest.model_dump(by_alias=True))
        written.append(manifest_path)
        return written


def _write_json(path: Path, payload: Any) -> None:
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


__all__ = ["CloudAssembly"]
