"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from rootcause.models.config import DiscoveryConfig, KubeConfig, LogConfig, RootCauseConfig


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"ROOTCAUSE_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> RootCauseConfig:
    """Load configuration from ROOTCAUSE_* environment variables."""
    return RootCauseConfig(
        kube=KubeConfig(
            kubeconfig=_env("KUBECONFIG", ""),
            context=_env("KUBE_CONTEXT", ""),
        ),
        discovery=DiscoveryConfig(
            refresh_ttl_seconds=_env_int("DISCOVERY_REFRESH_TTL", 300, min_val=0, max_val=86400),
            timeout_seconds=_env_int("DISCOVERY_TIMEOUT", 10, min_val=1, max_val=120),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
