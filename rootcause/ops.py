"""Generic get/list operations over any resolvable resource type.

A ResourceReader is the handler-side consumer of the resolver and the
redactor: it resolves the caller's loose identifier, performs the read
through an injected fetch function, and redacts every record before
returning it. Nothing read from the API server leaves here unredacted.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any

import structlog

from rootcause.kube.errors import InvalidInputError
from rootcause.kube.resolver import Resolver
from rootcause.models.resources import CanonicalResourceType, ResourceIdentifier
from rootcause.redact import redact_value

if TYPE_CHECKING:
    from kubernetes_asyncio.client import ApiClient  # type: ignore[import-untyped]

_log = structlog.get_logger(component="ops")

# fetch(resource_type, namespace, name) -> raw object, or a list document when name is None
Fetch = Callable[[CanonicalResourceType, str, "str | None"], Awaitable[Any]]


def _arg(args: Mapping[str, object], key: str) -> str:
    value = args.get(key)
    return value.strip() if isinstance(value, str) else ""


def resource_path(resource_type: CanonicalResourceType, namespace: str = "", name: str | None = None) -> str:
    """Build the REST path for a resource type, optional namespace and name."""
    gvr = resource_type.gvr
    base = f"/api/{gvr.version}" if not gvr.group else f"/apis/{gvr.group}/{gvr.version}"
    if resource_type.namespaced and namespace:
        base = f"{base}/namespaces/{namespace}"
    path = f"{base}/{gvr.resource}"
    if name:
        path = f"{path}/{name}"
    return path


def api_client_fetch(api_client: ApiClient, timeout_seconds: float = 10.0) -> Fetch:
    """Return a Fetch that reads objects through a kubernetes-asyncio ApiClient."""

    async def _fetch(resource_type: CanonicalResourceType, namespace: str, name: str | None) -> Any:
        return await api_client.call_api(
            resource_path(resource_type, namespace, name),
            "GET",
            header_params={"Accept": "application/json"},
            response_types_map={200: "object"},
            auth_settings=["BearerToken"],
            _return_http_data_only=True,
            _request_timeout=timeout_seconds,
        )

    return _fetch


class ResourceReader:
    """Resolve, read and redact resources named by tool arguments.

    Args:
        resolver: Resolver used for every identifier (best-effort mode).
        fetch:    Coroutine function performing the actual API read.
    """

    def __init__(self, resolver: Resolver, fetch: Fetch) -> None:
        self._resolver = resolver
        self._fetch = fetch

    def _target(self, args: Mapping[str, object]) -> tuple[CanonicalResourceType, str]:
        identifier = ResourceIdentifier.from_args(args)
        resource_type = self._resolver.resolve_best_effort(identifier)
        namespace = _arg(args, "namespace") if resource_type.namespaced else ""
        return resource_type, namespace

    async def get(self, args: Mapping[str, object]) -> object:
        """Read one object. ``name`` is required; so is ``namespace`` for namespaced types."""
        name = _arg(args, "name")
        if not name:
            raise InvalidInputError("name is required")
        resource_type, namespace = self._target(args)
        if resource_type.namespaced and not namespace:
            raise InvalidInputError("namespace required for namespaced resource")

        _log.debug(
            "get resource",
            resource=str(resource_type.gvr),
            namespace=namespace,
            name=name,
        )
        record = await self._fetch(resource_type, namespace, name)
        return redact_value(record)

    async def list(self, args: Mapping[str, object]) -> list[object]:
        """List objects; a namespaced type without namespace lists every namespace."""
        resource_type, namespace = self._target(args)
        _log.debug("list resources", resource=str(resource_type.gvr), namespace=namespace or "<all>")

        document = await self._fetch(resource_type, namespace, None)
        items = document.get("items") if isinstance(document, Mapping) else document
        if items is None:
            return []
        if not isinstance(items, (list, tuple)):
            items = [items]
        return [redact_value(item) for item in items]
