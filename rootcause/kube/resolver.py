"""Resource type resolution.

Turns a loosely-specified ResourceIdentifier into exactly one canonical
resource type and its scope, or raises a precise ResolutionError.

Two entry points:

    resolve_exact        -- REST-mapper lookups only. Requires a kind (with
                            optional apiVersion) or a resource name.
    resolve_best_effort  -- splits ``resource.group`` shorthand, tries the
                            exact path, then scans the preferred discovery
                            groups for plural/singular/short-name or kind
                            matches. Multiple matches are never guessed
                            between; they are reported sorted.

Matching in the scan is case-sensitive and exact.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import replace

import structlog

from rootcause.kube.discovery import PreferredResourceLister, RESTMapper
from rootcause.kube.errors import (
    AmbiguousResourceError,
    DiscoveryUnavailableError,
    GroupDiscoveryFailedError,
    InvalidInputError,
    ResolutionError,
    ResourceNotFoundError,
)
from rootcause.models.resources import (
    APIResourceGroup,
    APIResourceInfo,
    CanonicalResourceType,
    Candidate,
    GroupVersion,
    GroupVersionResource,
    ResourceIdentifier,
    parse_group_resource,
)

_log = structlog.get_logger(component="kube.resolver")


class Resolver:
    """Resolves resource identifiers against injected discovery capabilities.

    Args:
        mapper:    Exact-match lookups (usually the current DiscoverySnapshot
                   or a DiscoveryCache delegating to it).
        discovery: Preferred-resource enumeration for best-effort scans.
                   Optional; best-effort scans fail without it.
    """

    def __init__(
        self,
        mapper: RESTMapper | None,
        discovery: PreferredResourceLister | None = None,
    ) -> None:
        self._mapper = mapper
        self._discovery = discovery

    def _require_mapper(self) -> RESTMapper:
        if self._mapper is None:
            raise DiscoveryUnavailableError("missing rest mapper")
        return self._mapper

    # ------------------------------------------------------------------
    # Exact resolution
    # ------------------------------------------------------------------

    def resolve_exact(self, identifier: ResourceIdentifier) -> CanonicalResourceType:
        """Resolve via the REST mapper only.

        A supplied ``resource`` is looked up first and refined through its
        kind so that the scope comes from the authoritative mapping. On a
        miss, falls back to ``(group, kind, version)``.
        """
        mapper = self._require_mapper()
        resource_name, group = parse_group_resource(identifier.resource)
        group = group or identifier.group

        gv: GroupVersion | None = None
        if identifier.api_version:
            try:
                gv = GroupVersion.parse(identifier.api_version)
            except ValueError as exc:
                raise InvalidInputError(str(exc)) from exc

        resource_error: ResolutionError | None = None
        if resource_name:
            try:
                return self._resolve_by_resource(mapper, identifier, gv, resource_name, group)
            except DiscoveryUnavailableError:
                raise
            except ResolutionError as exc:
                resource_error = exc
                _log.debug("resource lookup missed", resource=identifier.resource, error=str(exc))

        if not identifier.kind:
            if resource_error is not None:
                raise resource_error
            if resource_name:
                qualified = f"{resource_name}.{group}" if group else resource_name
                raise ResourceNotFoundError(f'"{qualified}"')
            raise InvalidInputError("apiVersion and kind required")

        version = ""
        if gv is not None:
            group, version = gv.group, gv.version

        mapping = mapper.rest_mapping(group, identifier.kind, version)
        _log.debug(
            "resolved resource by kind",
            kind=identifier.kind,
            resource=mapping.resource,
            group_version=str(mapping.gvr.group_version),
            namespaced=mapping.namespaced,
        )
        return mapping

    @staticmethod
    def _resolve_by_resource(
        mapper: RESTMapper,
        identifier: ResourceIdentifier,
        gv: GroupVersion | None,
        resource_name: str,
        group: str,
    ) -> CanonicalResourceType:
        version = ""
        if gv is not None:
            version = gv.version
            group = group or gv.group

        gvr = mapper.resource_for(GroupVersionResource(group=group, version=version, resource=resource_name))
        gvk = mapper.kind_for(gvr)
        mapping = mapper.rest_mapping(gvk.group, gvk.kind, gvk.version)
        _log.debug(
            "resolved resource by name",
            resource=identifier.resource,
            group_version=str(mapping.gvr.group_version),
            namespaced=mapping.namespaced,
        )
        return mapping

    # ------------------------------------------------------------------
    # Best-effort resolution
    # ------------------------------------------------------------------

    def resolve_best_effort(self, identifier: ResourceIdentifier) -> CanonicalResourceType:
        """Resolve sparse or informal identifiers, scanning discovery if needed.

        An explicit apiVersion that fails the exact path is fatal: the
        caller was precise and wrong, so no scan is attempted.
        """
        self._require_mapper()
        ident = split_qualified_resource(identifier)

        if ident.api_version or ident.resource:
            try:
                return self.resolve_exact(ident)
            except DiscoveryUnavailableError:
                raise
            except ResolutionError as exc:
                if ident.api_version:
                    raise
                _log.debug("exact resolution missed; scanning discovery", error=str(exc))

        if not ident.kind and not ident.resource:
            raise InvalidInputError("kind or resource required")

        groups = self._preferred_groups()
        candidates = collect_candidates(groups, ident)
        return choose_candidate(candidates, ident)

    def _preferred_groups(self) -> tuple[APIResourceGroup, ...]:
        if self._discovery is None:
            raise DiscoveryUnavailableError("missing discovery client")
        try:
            return tuple(self._discovery.server_preferred_resources())
        except GroupDiscoveryFailedError as exc:
            _log.warning(
                "partial discovery failure; scanning available groups",
                failed_groups=sorted(exc.failures),
            )
            return exc.groups


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def split_qualified_resource(identifier: ResourceIdentifier) -> ResourceIdentifier:
    """Move the group suffix of ``resource.group`` into ``group`` when unset."""
    if identifier.group or "." not in identifier.resource:
        return identifier
    resource, group = parse_group_resource(identifier.resource)
    return replace(identifier, resource=resource, group=group)


def _entry_matches(entry: APIResourceInfo, identifier: ResourceIdentifier) -> bool:
    if not entry.name or entry.is_subresource:
        return False
    if identifier.resource:
        target = identifier.resource
        return target in (entry.name, entry.singular_name) or target in entry.short_names
    if identifier.kind:
        return entry.kind == identifier.kind
    return True


def _scan(groups: Iterable[APIResourceGroup], identifier: ResourceIdentifier) -> Iterator[Candidate]:
    for item in groups:
        try:
            gv = GroupVersion.parse(item.group_version)
        except ValueError:
            continue
        if identifier.group and gv.group != identifier.group:
            continue
        if identifier.api_version and item.group_version != identifier.api_version:
            continue
        for entry in item.resources:
            if _entry_matches(entry, identifier):
                yield Candidate(
                    gvr=GroupVersionResource(gv.group, gv.version, entry.name),
                    namespaced=entry.namespaced,
                    group_version=item.group_version,
                )


def collect_candidates(
    groups: Iterable[APIResourceGroup],
    identifier: ResourceIdentifier,
) -> tuple[Candidate, ...]:
    """Return every discovery entry the identifier could mean."""
    return tuple(_scan(groups, identifier))


def choose_candidate(
    candidates: tuple[Candidate, ...],
    identifier: ResourceIdentifier,
) -> CanonicalResourceType:
    """Accept exactly one candidate; report none or many as errors."""
    if not candidates:
        if identifier.resource:
            raise ResourceNotFoundError(f'"{identifier.resource}"')
        raise ResourceNotFoundError(f'kind "{identifier.kind}"')
    if len(candidates) > 1:
        err = AmbiguousResourceError(c.label for c in candidates)
        _log.warning(
            "ambiguous resource identifier",
            resource=identifier.resource,
            kind=identifier.kind,
            candidates=list(err.candidates),
        )
        raise err
    chosen = candidates[0]
    _log.debug(
        "resolved resource from discovery scan",
        resource=chosen.gvr.resource,
        group_version=chosen.group_version,
        namespaced=chosen.namespaced,
    )
    return CanonicalResourceType(gvr=chosen.gvr, namespaced=chosen.namespaced)


# ---------------------------------------------------------------------------
# Functional conveniences
# ---------------------------------------------------------------------------


def resolve_resource(mapper: RESTMapper | None, identifier: ResourceIdentifier) -> CanonicalResourceType:
    """Exact resolution against *mapper*."""
    return Resolver(mapper).resolve_exact(identifier)


def resolve_resource_best_effort(
    mapper: RESTMapper | None,
    discovery: PreferredResourceLister | None,
    identifier: ResourceIdentifier,
) -> CanonicalResourceType:
    """Best-effort resolution against *mapper* and *discovery*."""
    return Resolver(mapper, discovery).resolve_best_effort(identifier)
