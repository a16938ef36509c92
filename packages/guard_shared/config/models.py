"""Typed configuration models for WorkflowGuard runtime settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "workflowguard" / "workflowguard.yaml"

_COMPONENT_KINDS = ("service", "adapter", "substrate")


class LoggingSettings(BaseModel):
    """Structured logging configuration shared by all components."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "workflowguard"
    environment: str = "dev"


class OtelSettings(BaseModel):
    """OpenTelemetry naming for public API tracing and metrics."""

    enabled: bool = True
    meter_name: str = Field(default="workflowguard.public_api", min_length=1)
    tracer_name: str = Field(default="workflowguard.public_api", min_length=1)
    metric_prefix: str = Field(default="workflowguard", min_length=1)


class ObservabilitySettings(BaseModel):
    """Global observability configuration."""

    otel: OtelSettings = Field(default_factory=OtelSettings)


class ComponentNamespaceSettings(BaseModel):
    """Namespace map for grouped settings under ``components.<kind>``."""

    model_config = ConfigDict(extra="allow")


class ComponentsSettings(BaseModel):
    """Typed ``components`` subtree holding per-component settings."""

    service: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )
    adapter: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )
    substrate: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )

    @model_validator(mode="before")
    @classmethod
    def _reject_flat_component_keys(cls, value: object) -> object:
        """Reject flat ``service_x`` keys in favor of grouped namespaces."""
        if not isinstance(value, dict):
            return value
        for key in value:
            if isinstance(key, str) and key.startswith(
                tuple(f"{kind}_" for kind in _COMPONENT_KINDS)
            ):
                kind, _, name = key.partition("_")
                raise ValueError(
                    f"components.{key} is invalid; use components.{kind}.{name} instead"
                )
        return value


class GuardSettings(BaseSettings):
    """Root runtime settings resolved from init/env/yaml sources.

    Environment variables use the ``WORKFLOWGUARD_`` prefix with ``__`` as the
    nesting delimiter, e.g. ``WORKFLOWGUARD_LOGGING__LEVEL=DEBUG``.
    """

    model_config = SettingsConfigDict(
        env_prefix="WORKFLOWGUARD_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
        yaml_file=DEFAULT_CONFIG_PATH,
        yaml_file_encoding="utf-8",
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    components: ComponentsSettings = Field(default_factory=ComponentsSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply precedence: init > env > yaml > model defaults."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
        )


TComponentSettings = TypeVar("TComponentSettings", bound=BaseModel)


def resolve_component_settings(
    *,
    settings: GuardSettings,
    component_id: str,
    model: type[TComponentSettings],
) -> TComponentSettings:
    """Resolve one component settings object from grouped ``components`` keys.

    ``service_workflow_versions`` reads ``components.service.workflow_versions``;
    a missing subtree yields the model defaults.
    """
    kind, separator, name = component_id.partition("_")
    if not separator or kind not in _COMPONENT_KINDS:
        raise ValueError(f"unsupported component id: {component_id!r}")

    namespace = settings.components.model_dump(mode="python").get(kind, {})
    resolved = namespace.get(name, {})
    if not isinstance(resolved, dict):
        raise TypeError(f"components.{kind}.{name} must resolve to an object mapping")
    return model.model_validate(resolved)
