"""Construct tree, resources and synthesis pipeline for ARM templates."""

from .app import App
from .construct import Construct, DeploymentContext
from .errors import ArmSynthError, SynthesisError, ValidationError
from .resource import Resource
from .scopes import DeploymentScope
from .stacks import ResourceGroupStack, SubscriptionStack

__all__ = [
    "App",
    "ArmSynthError",
    "Construct",
    "DeploymentContext",
    "DeploymentScope",
    "Resource",
    "ResourceGroupStack",
    "SubscriptionStack",
    "SynthesisError",
    "ValidationError",
]
