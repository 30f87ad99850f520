"""Synthesis pipeline: prepare, transform into templates, validate."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from core.constants import (
    MAX_TEMPLATE_BYTES,
    MAX_TEMPLATE_OUTPUTS,
    MAX_TEMPLATE_RESOURCES,
    TEMPLATE_SIZE_WARNING_BYTES,
)
from core.construct import Construct
from core.errors import ArmSynthError, DependencyCycleError, SynthesisError
from core.models import ArmTemplate, AssemblyManifest, TemplateArtifact
from core.resource import Resource
from core.scopes import DeploymentScope, get_schema, is_resource_available
from core.synthesis.assembly import CloudAssembly
from core.synthesis.collector import ResourceCollector, StackInfo
from core.synthesis.context import SynthesisContext
from core.synthesis.dependencies import DependencyResolver
from core.synthesis.traverser import TreeTraverser
from core.validation import ValidationResult, ValidationResultBuilder

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _TemplatePlan:
    info: StackInfo
    name: str
    resources: List[Resource]


class Synthesizer:
    """Turn a construct tree into one ARM template per stack."""

    def __init__(
        self,
        traverser: TreeTraverser | None = None,
        collector: ResourceCollector | None = None,
        *,
        strict: bool = False,
        skip_validation: bool = False,
        max_resources_per_template: int | None = None,
    ) -> None:
        if max_resources_per_template is not None and max_resources_per_template < 1:
            raise ValueError("max_resources_per_template must be a positive integer")
        self.traverser = traverser or TreeTraverser()
        self.collector = collector or ResourceCollector()
        self.strict = strict
        self.skip_validation = skip_validation
        self.max_resources_per_template = max_resources_per_template

    def synthesize(self, root: Construct) -> CloudAssembly:
        try:
            stacks = self.prepare(root)
            assembly = self.transform(stacks)
            if not self.skip_validation:
                self._enforce(self.validate(assembly))
        except SynthesisError:
            raise
        except ArmSynthError as exc:
            raise SynthesisError(f"Synthesis failed: {exc}") from exc
        return assembly

    def prepare(self, root: Construct) -> Dict[str, StackInfo]:
        traversal = self.traverser.traverse(root)
        logger.debug("Traversed %d construct(s), %d stack(s)", len(traversal.constructs), len(traversal.stacks))
        stacks = self.collector.collect(traversal.constructs, traversal.stacks)
        self.collector.validate_resources(stacks)
        return stacks

    def transform(self, stacks: Dict[str, StackInfo]) -> CloudAssembly:
        context = SynthesisContext()
        resolver = DependencyResolver(context)
        plans = self._plan(stacks, context, resolver)

        rendered: List[tuple[_TemplatePlan, List[Dict[str, Any]], List[str]]] = []
        for plan in plans:
            fragments: List[Dict[str, Any]] = []
            template_deps: List[str] = []
            for resource in plan.resources:
                fragment = resource.to_arm_template()
                resolved = resolver.resolve(resource, plan.name)
                if resolved.depends_on:
                    existing = list(fragment.get("dependsOn", []))
                    fragment["dependsOn"] = existing + [item for item in resolved.depends_on if item not in existing]
                for template in resolved.templates:
                    if template not in template_deps:
                        template_deps.append(template)
                fragments.append(fragment)
            rendered.append((plan, fragments, template_deps))
        _check_template_cycles({plan.name: template_deps for plan, _, template_deps in rendered})

        assembly = CloudAssembly(manifest=AssemblyManifest())
        for plan, fragments, template_deps in rendered:
            assembly.templates[plan.name] = ArmTemplate(
                template_schema=get_schema(plan.info.scope),
                resources=fragments,
                outputs=context.outputs_for(plan.name),
            )
            assembly.manifest.artifacts.append(
                TemplateArtifact(
                    name=plan.name,
                    stack=plan.info.name,
                    scope=plan.info.scope,
                    file=f"{plan.name}.json",
                    resource_count=len(fragments),
                    depends_on=template_deps,
                )
            )
        return assembly

    def validate(self, assembly: CloudAssembly) -> ValidationResult:
        builder = ValidationResultBuilder()
        for artifact in assembly.manifest.artifacts:
            template = assembly.templates[artifact.name]
            builder.merge(_validate_template(artifact.name, DeploymentScope(artifact.scope), template))
        return builder.build()

    # ------------------------------------------------------------------
    def _plan(
        self,
        stacks: Dict[str, StackInfo],
        context: SynthesisContext,
        resolver: DependencyResolver,
    ) -> List[_TemplatePlan]:
        plans: List[_TemplatePlan] = []
        used: set[str] = set()
        for key, info in stacks.items():
            ordered = resolver.topological_sort(info.resources)
            base = _claim_name(info.name, key.replace("/", "-"), used)
            for index, chunk in enumerate(self._chunk(ordered)):
                name = base if index == 0 else _claim_name(f"{base}-part{index + 1}", None, used)
                for resource in chunk:
                    context.assign(resource, name)
                plans.append(_TemplatePlan(info=info, name=name, resources=chunk))
        return plans

    def _chunk(self, resources: List[Resource]) -> List[List[Resource]]:
        limit = self.max_resources_per_template
        if not limit or len(resources) <= limit:
            return [resources]
        return [resources[index : index + limit] for index in range(0, len(resources), limit)]

    def _enforce(self, result: ValidationResult) -> None:
        for warning in result.warnings:
            logger.warning("Template validation: %s", warning.describe())
        failures = list(result.errors)
        if self.strict:
            failures.extend(result.warnings)
        if failures:
            details = "\n".join(f"  - {issue.describe()}" for issue in failures)
            raise SynthesisError(f"Synthesis failed: template validation reported {len(failures)} issue(s)\n{details}")


def _claim_name(preferred: str, fallback: str | None, used: set[str]) -> str:
    """Reserve a template name; names compare case-insensitively."""
    candidates = [preferred] if fallback is None else [preferred, fallback]
    for candidate in candidates:
        if candidate.lower() not in used:
            used.add(candidate.lower())
            return candidate
    base = candidates[-1]
    suffix = 2
    while f"{base}-{suffix}".lower() in used:
        suffix += 1
    name = f"{base}-{suffix}"
    used.add(name.lower())
    return name


def _check_template_cycles(edges: Dict[str, List[str]]) -> None:
    state: Dict[str, str] = {}

    def visit(name: str, trail: List[str]) -> None:
        marker = state.get(name)
        if marker == "done":
            return
        if marker == "visiting":
            cycle = " -> ".join([*trail[trail.index(name):], name])
            raise DependencyCycleError(f"Template dependency cycle detected: {cycle}")
        state[name] = "visiting"
        for target in edges.get(name, []):
            visit(target, [*trail, name])
        state[name] = "done"

    for name in edges:
        visit(name, [])


def _validate_template(name: str, scope: DeploymentScope, template: ArmTemplate) -> ValidationResult:
    builder = ValidationResultBuilder()
    seen: set[tuple[str, str]] = set()

    for index, resource in enumerate(template.resources):
        path = f"{name}.resources[{index}]"
        for required in ("type", "apiVersion", "name"):
            if not resource.get(required):
                builder.add_error(f"Resource is missing '{required}'", path=path, code="missing-field")
        key = (str(resource.get("type", "")).lower(), str(resource.get("name", "")).lower())
        if key in seen:
            builder.add_error(f"Duplicate resource {resource.get('type')} '{resource.get('name')}'", path=path, code="duplicate")
        seen.add(key)
        resource_type = resource.get("type")
        if resource_type and not is_resource_available(scope, resource_type):
            builder.add_warning(
                f"{resource_type} is not a known {scope.value}-scope resource type",
                path=path,
                code="scope-availability",
            )

    if len(template.resources) > MAX_TEMPLATE_RESOURCES:
        builder.add_error(
            f"Template has {len(template.resources)} resources; the ARM limit is {MAX_TEMPLATE_RESOURCES}",
            path=name,
            code="resource-limit",
        )
    if len(template.outputs) > MAX_TEMPLATE_OUTPUTS:
        builder.add_error(
            f"Template has {len(template.outputs)} outputs; the ARM limit is {MAX_TEMPLATE_OUTPUTS}",
            path=name,
            code="output-limit",
        )

    size = len(json.dumps(template.to_dict()).encode("utf-8"))
    if size > MAX_TEMPLATE_BYTES:
        builder.add_error(f"Template is {size} bytes; the ARM limit is {MAX_TEMPLATE_BYTES}", path=name, code="size-limit")
    elif size > TEMPLATE_SIZE_WARNING_BYTES:
        builder.add_warning(f"Template is {size} bytes, close to the ARM limit", path=name, code="size-limit")
    return builder.build()


__all__ = ["Synthesizer"]
