from __future__ import annotations

import pytest

from itermap import CoordinatorConfig, CoordinatorConfigurationError


def test_config_defaults(monkeypatch):
    for name in (
        "ITERMAP_RESOLVE_WITHOUT_END",
        "ITERMAP_DUPLICATE_REMAP_POLICY",
        "ITERMAP_REJECT_ON_HOOK_ERROR",
        "ITERMAP_TELEMETRY_BACKEND",
    ):
        monkeypatch.delenv(name, raising=False)

    config = CoordinatorConfig.from_env()

    assert config == CoordinatorConfig()
    assert config.resolve_without_end is True
    assert config.duplicate_remap_policy == "recheck"
    assert config.reject_on_hook_error is True
    assert config.telemetry_backend == "null"


def test_config_from_env_reads_overrides(monkeypatch):
    monkeypatch.setenv("ITERMAP_RESOLVE_WITHOUT_END", "off")
    monkeypatch.setenv("ITERMAP_DUPLICATE_REMAP_POLICY", " STALL ")
    monkeypatch.setenv("ITERMAP_REJECT_ON_HOOK_ERROR", "0")
    monkeypatch.setenv("ITERMAP_TELEMETRY_BACKEND", "InMemory")

    config = CoordinatorConfig.from_env()

    assert config.resolve_without_end is False
    assert config.duplicate_remap_policy == "stall"
    assert config.reject_on_hook_error is False
    assert config.telemetry_backend == "inmemory"


def test_config_blank_env_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("ITERMAP_DUPLICATE_REMAP_POLICY", "   ")
    monkeypatch.setenv("ITERMAP_RESOLVE_WITHOUT_END", "")

    config = CoordinatorConfig.from_env()

    assert config.duplicate_remap_policy == "recheck"
    assert config.resolve_without_end is True


def test_config_rejects_invalid_boolean(monkeypatch):
    monkeypatch.setenv("ITERMAP_REJECT_ON_HOOK_ERROR", "maybe")
    with pytest.raises(CoordinatorConfigurationError, match="boolean"):
        CoordinatorConfig.from_env()


def test_config_rejects_unknown_policy():
    with pytest.raises(CoordinatorConfigurationError, match="duplicate_remap_policy"):
        CoordinatorConfig(duplicate_remap_policy="retry")  # type: ignore[arg-type]

    with pytest.raises(ValueError):
        CoordinatorConfig(telemetry_backend=" ")
