"""Application root construct."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Mapping

from core.constants import DEFAULT_OUTDIR
from core.construct import Construct, DeploymentContext
from core.synthesis.assembly import CloudAssembly
from core.synthesis.synthesizer import Synthesizer

logger = logging.getLogger(__name__)


class App(Construct):
    """Root of a construct tree; owns the key/value context and the output directory.

    Recognized context keys seed the deployment context inherited by every
    stack: ``subscriptionId``, ``tenantId``, ``location`` and ``tags``.
    """

    def __init__(
        self,
        *,
        id: str = "App",
        outdir: str | Path = DEFAULT_OUTDIR,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        values = dict(context or {})
        deployment = DeploymentContext(
            location=values.get("location"),
            tags=dict(values.get("tags") or {}),
            subscription_id=values.get("subscriptionId"),
            tenant_id=values.get("tenantId"),
        )
        super().__init__(None, id, context=deployment)
        for key, value in values.items():
            self.node.set_context(key, value)
        self.outdir = Path(outdir)
        self._stacks: List[Construct] = []

    @property
    def subscription_id(self) -> str | None:
        return self.node.try_get_context("subscriptionId")

    @property
    def tenant_id(self) -> str | None:
        return self.node.try_get_context("tenantId")

    @property
    def all_stacks(self) -> List[Construct]:
        return list(self._stacks)

    def register_stack(self, stack: Construct) -> None:
        if stack not in self._stacks:
            self._stacks.append(stack)

    def synth(
        self,
        *,
        outdir: str | Path | None = None,
        strict: bool = False,
        skip_validation: bool = False,
        max_resources_per_template: int | None = None,
        write: bool = True,
    ) -> CloudAssembly:
        synthesizer = Synthesizer(
            strict=strict,
            skip_validation=skip_validation,
            max_resources_per_template=max_resources_per_template,
        )
        assembly = synthesizer.synthesize(self)
        if write:
            target = Path(outdir) if outdir is not None else self.outdir
            assembly.write(target)
            logger.info("Wrote %d template(s) to %s", len(assembly.templates), target)
        return assembly


__all__ = ["App"]
