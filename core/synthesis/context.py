"""Template assignment bookkeeping and reference resolution across templates."""

from __future__ import annotations

import re
from typing import Any, Dict

from core.resource import Resource

_OUTPUT_NAME_INVALID = re.compile(r"[^A-Za-z0-9_]")


class SynthesisContext:
    """Knows which template every resource landed in during one synthesis run."""

    def __init__(self) -> None:
        self._templates: Dict[int, str] = {}
        self._outputs: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def assign(self, resource: Resource, template_name: str) -> None:
        self._templates[id(resource)] = template_name

    def template_of(self, resource: Resource) -> str | None:
        return self._templates.get(id(resource))

    def is_same_template(self, resource: Resource, template_name: str) -> bool:
        return self.template_of(resource) == template_name

    def get_resource_reference(self, resource: Resource, current_template: str) -> str:
        """Expression referencing ``resource`` from inside ``current_template``."""
        producer = self.template_of(resource)
        if producer is None or producer == current_template:
            return resource.resource_id
        deployment = f"{producer.lower()}-deployment"
        return (
            f"[reference(resourceId('Microsoft.Resources/deployments', '{deployment}'))"
            f".outputs.{self.output_name(resource)}.value]"
        )

    def require_output(self, resource: Resource) -> str:
        """Register an id output on the producing template and return its name."""
        producer = self.template_of(resource)
        name = self.output_name(resource)
        if producer is not None:
            self._outputs.setdefault(producer, {})[name] = {"type": "string", "value": resource.resource_id}
        return name

    def outputs_for(self, template_name: str) -> Dict[str, Dict[str, Any]]:
        return dict(self._outputs.get(template_name, {}))

    @staticmethod
    def output_name(resource: Resource) -> str:
        key = resource.node.path or resource.node.id
        return f"{_OUTPUT_NAME_INVALID.sub('_', key)}_id"


__all__ = ["SynthesisContext"]
