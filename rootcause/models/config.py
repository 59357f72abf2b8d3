"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class KubeConfig:
    """Kubernetes client configuration."""

    kubeconfig: str = ""
    context: str = ""


@dataclass
class DiscoveryConfig:
    """Discovery snapshot refresh configuration."""

    refresh_ttl_seconds: int = 300
    timeout_seconds: int = 10


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class RootCauseConfig:
    """Top-level rootcause configuration."""

    kube: KubeConfig = field(default_factory=KubeConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    log: LogConfig = field(default_factory=LogConfig)
