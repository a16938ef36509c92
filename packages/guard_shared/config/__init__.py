"""Public API for shared WorkflowGuard configuration utilities."""

from .loader import load_settings
from .models import (
    DEFAULT_CONFIG_PATH,
    ComponentsSettings,
    GuardSettings,
    LoggingSettings,
    ObservabilitySettings,
    OtelSettings,
    resolve_component_settings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ComponentsSettings",
    "GuardSettings",
    "LoggingSettings",
    "ObservabilitySettings",
    "OtelSettings",
    "load_settings",
    "resolve_component_settings",
]
