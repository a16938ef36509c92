"""Tests for HubSpot adapter settings resolution."""

from __future__ import annotations

from packages.guard_shared.config import GuardSettings
from resources.adapters.hubspot.config import (
    HubspotAdapterSettings,
    resolve_hubspot_adapter_settings,
)


def test_resolve_hubspot_adapter_settings_defaults() -> None:
    """Resolver should return defaults when component config is absent."""
    resolved = resolve_hubspot_adapter_settings(GuardSettings())

    assert resolved == HubspotAdapterSettings()
    assert resolved.base_url == "https://api.hubapi.com"


def test_resolve_hubspot_adapter_settings_component_override() -> None:
    """Resolver should hydrate explicit component overrides."""
    settings = GuardSettings(
        components={
            "adapter": {
                "hubspot": {
                    "base_url": "http://localhost:9999",
                    "access_token": "token",
                    "timeout_seconds": 3.0,
                }
            }
        }
    )

    resolved = resolve_hubspot_adapter_settings(settings)

    assert resolved.base_url == "http://localhost:9999"
    assert resolved.access_token == "token"
    assert resolved.timeout_seconds == 3.0
