"""Synthesis pipeline turning construct trees into ARM templates."""

from .assembly import CloudAssembly
from .collector import ResourceCollector, StackInfo
from .context import SynthesisContext
from .dependencies import DependencyResolver
from .synthesizer import Synthesizer
from .traverser import TraversalResult, TreeTraverser

__all__ = [
    "CloudAssembly",
    "DependencyResolver",
    "ResourceCollector",
    "StackInfo",
    "SynthesisContext",
    "Synthesizer",
    "TraversalResult",
    "TreeTraverser",
]
