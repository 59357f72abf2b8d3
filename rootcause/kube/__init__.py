"""Kubernetes resource identity for rootcause.

Submodules:
    discovery -- immutable discovery snapshot (REST mapper + enumeration).
    clients   -- kubernetes-asyncio client construction and the TTL-refreshed
                 discovery cache.
    resolver  -- exact and best-effort resource type resolution.
    errors    -- resolution error taxonomy.
"""

from rootcause.kube.clients import (
    DiscoveryCache,
    api_client_fetcher,
    build_api_client,
    kubeconfig_path,
    load_discovery,
)
from rootcause.kube.discovery import DiscoverySnapshot, PreferredResourceLister, RESTMapper
from rootcause.kube.errors import (
    AmbiguousResourceError,
    DiscoveryUnavailableError,
    GroupDiscoveryFailedError,
    InvalidInputError,
    ResolutionError,
    ResourceNotFoundError,
)
from rootcause.kube.resolver import Resolver, resolve_resource, resolve_resource_best_effort

__all__ = [
    "AmbiguousResourceError",
    "DiscoveryCache",
    "DiscoverySnapshot",
    "DiscoveryUnavailableError",
    "GroupDiscoveryFailedError",
    "InvalidInputError",
    "PreferredResourceLister",
    "RESTMapper",
    "ResolutionError",
    "ResourceNotFoundError",
    "Resolver",
    "api_client_fetcher",
    "build_api_client",
    "kubeconfig_path",
    "load_discovery",
    "resolve_resource",
    "resolve_resource_best_effort",
]
