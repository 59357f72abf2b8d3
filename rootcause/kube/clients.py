"""Kubernetes client construction and the discovery cache.

The DiscoveryCache owns the only I/O behind resolution: it loads a
DiscoverySnapshot from the API server and swaps it in atomically. Readers
(the resolver) never lock; they observe whichever snapshot was current when
they read it. Reloads are serialised and rate-limited by a TTL.
"""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import structlog

from rootcause.kube.discovery import DiscoverySnapshot
from rootcause.kube.errors import DiscoveryUnavailableError
from rootcause.models.resources import (
    APIResourceGroup,
    APIResourceInfo,
    CanonicalResourceType,
    GroupVersionKind,
    GroupVersionResource,
)

if TYPE_CHECKING:
    from kubernetes_asyncio.client import ApiClient  # type: ignore[import-untyped]

    from rootcause.models.config import KubeConfig

_log = structlog.get_logger(component="kube.discovery")

JSONFetcher = Callable[[str], Awaitable[dict[str, Any]]]
SnapshotLoader = Callable[[], Awaitable[DiscoverySnapshot]]


def kubeconfig_path(path: str) -> str:
    """Expand a leading ``~`` or environment variables in a kubeconfig path."""
    if not path:
        return ""
    if path.startswith("~"):
        return os.path.expanduser(path)
    return os.path.expandvars(path)


async def build_api_client(config: KubeConfig) -> ApiClient:
    """Create a kubernetes-asyncio ApiClient.

    An explicit kubeconfig path or context forces kubeconfig loading;
    otherwise the in-cluster service account is tried first.
    """
    # Import lazily: kubernetes-asyncio probes the environment on import.
    from kubernetes_asyncio import client as k8s_client
    from kubernetes_asyncio import config as k8s_config

    configuration = k8s_client.Configuration()
    explicit = kubeconfig_path(config.kubeconfig)
    try:
        if explicit or config.context:
            raise k8s_config.ConfigException("explicit kubeconfig requested")
        k8s_config.load_incluster_config(client_configuration=configuration)
        _log.info("k8s client configured from in-cluster service account")
    except k8s_config.ConfigException:
        await k8s_config.load_kube_config(
            config_file=explicit or None,
            context=config.context or None,
            client_configuration=configuration,
        )
        _log.info("k8s client configured from kubeconfig", context=config.context or "<current>")
    return k8s_client.ApiClient(configuration=configuration)


def api_client_fetcher(api_client: ApiClient, timeout_seconds: float = 10.0) -> JSONFetcher:
    """Return a fetcher that GETs a discovery path and returns decoded JSON."""

    async def _fetch(path: str) -> dict[str, Any]:
        data = await api_client.call_api(
            path,
            "GET",
            header_params={"Accept": "application/json"},
            response_types_map={200: "object"},
            auth_settings=["BearerToken"],
            _return_http_data_only=True,
            _request_timeout=timeout_seconds,
        )
        return data if isinstance(data, dict) else {}

    return _fetch


# ---------------------------------------------------------------------------
# Discovery document parsing
# ---------------------------------------------------------------------------


def _resource_info(raw: dict[str, Any]) -> APIResourceInfo:
    return APIResourceInfo(
        name=str(raw.get("name", "")),
        kind=str(raw.get("kind", "")),
        namespaced=bool(raw.get("namespaced", False)),
        singular_name=str(raw.get("singularName", "") or ""),
        short_names=tuple(str(s) for s in raw.get("shortNames") or ()),
    )


def _resource_group(group_version: str, raw: dict[str, Any]) -> APIResourceGroup:
    return APIResourceGroup(
        group_version=str(raw.get("groupVersion") or group_version),
        resources=tuple(_resource_info(r) for r in raw.get("resources") or () if isinstance(r, dict)),
    )


def _group_versions(core: dict[str, Any], apis: dict[str, Any]) -> list[str]:
    """Return every served group/version, each group's preferred version first."""
    ordered: list[str] = [str(v) for v in core.get("versions") or ()]
    for group in apis.get("groups") or ():
        preferred = (group.get("preferredVersion") or {}).get("groupVersion", "")
        versions = [str(v.get("groupVersion", "")) for v in group.get("versions") or ()]
        if preferred in versions:
            versions.remove(preferred)
            versions.insert(0, preferred)
        ordered.extend(v for v in versions if v)
    return ordered


async def load_discovery(fetch: JSONFetcher) -> DiscoverySnapshot:
    """Read the API server's discovery documents into a snapshot.

    A failure of an individual group/version is recorded on the snapshot
    and logged; a failed or malformed top-level ``/api`` or ``/apis``
    document raises DiscoveryUnavailableError.
    """
    try:
        core = await fetch("/api")
        apis = await fetch("/apis")
        group_versions = _group_versions(core, apis)
    except Exception as exc:
        raise DiscoveryUnavailableError(f"unable to read server API groups: {exc}") from exc

    async def _one(group_version: str) -> APIResourceGroup | str:
        path = f"/api/{group_version}" if "/" not in group_version else f"/apis/{group_version}"
        try:
            return _resource_group(group_version, await fetch(path))
        except Exception as exc:
            return str(exc) or type(exc).__name__

    results = await asyncio.gather(*(_one(gv) for gv in group_versions))

    groups: list[APIResourceGroup] = []
    failures: dict[str, str] = {}
    for group_version, result in zip(group_versions, results, strict=True):
        if isinstance(result, APIResourceGroup):
            groups.append(result)
        else:
            failures[group_version] = result
            _log.warning("group discovery failed", group_version=group_version, error=result)

    snapshot = DiscoverySnapshot(groups, failed_groups=failures)
    _log.info(
        "discovery loaded",
        group_versions=len(groups),
        resources=len(snapshot),
        failed=len(failures),
    )
    return snapshot


# ---------------------------------------------------------------------------
# Discovery cache
# ---------------------------------------------------------------------------


class DiscoveryCache:
    """Holds the current DiscoverySnapshot and reloads it on a TTL.

    Implements the RESTMapper and PreferredResourceLister protocols by
    delegating to the current snapshot, so a Resolver can be built over
    the cache directly.

    Args:
        loader:      Coroutine function producing a fresh snapshot.
        ttl_seconds: Minimum age before refresh() reloads. Zero or
                     negative disables refresh.
        clock:       Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        loader: SnapshotLoader,
        ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._ttl = ttl_seconds
        self._clock = clock
        self._snapshot: DiscoverySnapshot | None = None
        self._loaded_at = 0.0
        self._lock = asyncio.Lock()

    @classmethod
    def for_api_client(
        cls,
        api_client: ApiClient,
        ttl_seconds: float = 300,
        timeout_seconds: float = 10.0,
    ) -> DiscoveryCache:
        """Build a cache that loads discovery through *api_client*."""
        fetch = api_client_fetcher(api_client, timeout_seconds)
        return cls(lambda: load_discovery(fetch), ttl_seconds=ttl_seconds)

    @property
    def snapshot(self) -> DiscoverySnapshot:
        if self._snapshot is None:
            raise DiscoveryUnavailableError("discovery has not been loaded")
        return self._snapshot

    @property
    def loaded(self) -> bool:
        return self._snapshot is not None

    async def load(self) -> DiscoverySnapshot:
        """Load a fresh snapshot and make it current."""
        async with self._lock:
            return await self._load_locked()

    async def _load_locked(self) -> DiscoverySnapshot:
        snapshot = await self._loader()
        self._snapshot = snapshot
        self._loaded_at = self._clock()
        return snapshot

    def _fresh(self) -> bool:
        return self._snapshot is not None and self._clock() - self._loaded_at < self._ttl

    async def refresh(self) -> bool:
        """Reload if the TTL has elapsed. Returns True when a reload happened.

        Concurrent callers share one reload: the age is re-checked once the
        lock is held.
        """
        if self._ttl <= 0 or self._fresh():
            return False
        async with self._lock:
            if self._fresh():
                return False
            await self._load_locked()
        _log.debug("discovery refreshed", ttl_seconds=self._ttl)
        return True

    async def run(self, interval: float | None = None) -> None:
        """Refresh periodically until cancelled.

        Refresh failures are logged and the previous snapshot stays current.
        """
        period = interval if interval is not None else max(self._ttl, 1)
        while True:
            await asyncio.sleep(period)
            try:
                await self.refresh()
            except Exception as exc:
                _log.warning("discovery refresh failed; keeping previous snapshot", error=str(exc))

    # RESTMapper / PreferredResourceLister delegation

    def resource_for(self, partial: GroupVersionResource) -> GroupVersionResource:
        return self.snapshot.resource_for(partial)

    def kind_for(self, gvr: GroupVersionResource) -> GroupVersionKind:
        return self.snapshot.kind_for(gvr)

    def rest_mapping(self, group: str, kind: str, version: str = "") -> CanonicalResourceType:
        return self.snapshot.rest_mapping(group, kind, version)

    def server_preferred_resources(self) -> tuple[APIResourceGroup, ...]:
        return self.snapshot.server_preferred_resources()
