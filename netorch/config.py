"""
Netorch — Configuration System

All configuration is Pydantic-validated and loaded from:
1. a YAML file (defaults and extension declarations)
2. Environment variables (overrides)

Extensions are declared here in the order they should be matched;
build_extension_registry() turns them into the runtime registry;
build_requirement_registry() hands the resolver and probe settings to the
built-in requirement kinds.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from netorch.clients.prober import PingProber, ReachabilityProber
from netorch.clients.resolver import AsyncioResolver, HostnameResolver
from netorch.systems.extensions.registry import ExtensionRegistry
from netorch.systems.extensions.types import Extension
from netorch.systems.requirements.registry import RequirementRegistry, default_registry

# ─── Sub-configs ──────────────────────────────────────────────────


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"  # "console" | "json"


class ResolverConfig(BaseModel):
    # Per-lookup budget handed to the resolver on every reachability check
    timeout_s: float = 1.0


class ProbeConfig(BaseModel):
    command: str = "ping"
    count: int = 1
    timeout_s: int = 1


class SupervisorConfig(BaseModel):
    shell: str = "/bin/sh"
    # None waits for the helper however long it takes
    command_timeout_s: float | None = None

    @field_validator("command_timeout_s")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("command_timeout_s must be positive")
        return value


class SysfsConfig(BaseModel):
    root: str = "/sys/class/net"


# ─── Root Configuration ──────────────────────────────────────────


class NetorchConfig(BaseSettings):
    """
    Root configuration. Loads from YAML, overridable by env vars.
    """

    model_config = SettingsConfigDict(
        env_prefix="NETORCH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    supervisor: SupervisorConfig = Field(default_factory=SupervisorConfig)
    sysfs: SysfsConfig = Field(default_factory=SysfsConfig)
    extensions: list[Extension] = Field(default_factory=list)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: str | Path | None = None) -> NetorchConfig:
    """
    Load configuration from YAML file, then apply environment variable overrides.
    """
    raw: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                raw = yaml.safe_load(f) or {}

    overrides: dict[str, Any] = {}
    if level := os.environ.get("NETORCH_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = level
    if fmt := os.environ.get("NETORCH_LOG_FORMAT"):
        overrides.setdefault("logging", {})["format"] = fmt
    if sysfs_root := os.environ.get("NETORCH_SYSFS_ROOT"):
        overrides.setdefault("sysfs", {})["root"] = sysfs_root

    return NetorchConfig(**_deep_merge(raw, overrides))


def build_extension_registry(config: NetorchConfig) -> ExtensionRegistry:
    """Assemble the extension registry in declaration order."""
    registry = ExtensionRegistry()
    for extension in config.extensions:
        registry.append(extension)
    return registry


def build_requirement_registry(
    config: NetorchConfig,
    resolver: HostnameResolver | None = None,
    prober: ReachabilityProber | None = None,
) -> RequirementRegistry:
    """
    Assemble the requirement registry with the configured resolver budget.

    Without explicit collaborators, lookups go through AsyncioResolver and
    probes through a PingProber built from config.probe.
    """
    return default_registry(
        resolver=resolver or AsyncioResolver(),
        prober=prober or PingProber.from_config(config.probe),
        resolve_timeout_s=config.resolver.timeout_s,
    )
