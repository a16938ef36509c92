"""Settings loading entrypoint with deterministic precedence.

The cascade is always explicit overrides, then ``WORKFLOWGUARD_`` environment
variables, then the YAML config file, then model defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from pydantic_settings import SettingsConfigDict

from .models import GuardSettings


def load_settings(
    *,
    overrides: Mapping[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> GuardSettings:
    """Build root settings, optionally reading YAML from ``config_path``."""
    settings_cls: type[GuardSettings] = GuardSettings
    if config_path is not None:
        settings_cls = _settings_with_yaml(Path(config_path))
    return settings_cls(**dict(overrides or {}))


def _settings_with_yaml(path: Path) -> type[GuardSettings]:
    class _PathBoundGuardSettings(GuardSettings):
        model_config = SettingsConfigDict(yaml_file=path)

    return _PathBoundGuardSettings
