"""In-memory discovery snapshot.

A DiscoverySnapshot is an immutable point-in-time view of the resource
types served by the API server. It answers the two kinds of questions the
resolver asks:

    exact lookups  -- resource_for(), kind_for(), rest_mapping()
    enumeration    -- server_preferred_resources()

Group order is preference order: the first group/version listed for a
group is that group's preferred version.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol

from rootcause.kube.errors import (
    AmbiguousResourceError,
    GroupDiscoveryFailedError,
    ResourceNotFoundError,
)
from rootcause.models.resources import (
    APIResourceGroup,
    APIResourceInfo,
    CanonicalResourceType,
    GroupVersion,
    GroupVersionKind,
    GroupVersionResource,
)


class RESTMapper(Protocol):
    """Exact-match resolution backed by cached discovery metadata."""

    def resource_for(self, partial: GroupVersionResource) -> GroupVersionResource: ...

    def kind_for(self, gvr: GroupVersionResource) -> GroupVersionKind: ...

    def rest_mapping(self, group: str, kind: str, version: str = "") -> CanonicalResourceType: ...


class PreferredResourceLister(Protocol):
    """Enumeration of the preferred version of every API group."""

    def server_preferred_resources(self) -> tuple[APIResourceGroup, ...]: ...


def _parse_or_none(group_version: str) -> GroupVersion | None:
    try:
        return GroupVersion.parse(group_version)
    except ValueError:
        return None


def _names_resource(entry: APIResourceInfo, name: str) -> bool:
    if entry.is_subresource or not entry.name:
        return False
    singular = entry.singular_name or entry.kind.lower()
    return name in (entry.name.lower(), singular.lower())


class DiscoverySnapshot:
    """Immutable discovery data implementing RESTMapper and PreferredResourceLister."""

    def __init__(
        self,
        groups: Iterable[APIResourceGroup] = (),
        failed_groups: Mapping[str, str] | None = None,
    ) -> None:
        self._groups: tuple[APIResourceGroup, ...] = tuple(groups)
        self._failed: dict[str, str] = dict(failed_groups or {})

        preferred: dict[str, APIResourceGroup] = {}
        for group in self._groups:
            gv = _parse_or_none(group.group_version)
            if gv is not None and gv.group not in preferred:
                preferred[gv.group] = group
        self._preferred: tuple[APIResourceGroup, ...] = tuple(preferred.values())

    @property
    def groups(self) -> tuple[APIResourceGroup, ...]:
        return self._groups

    @property
    def failed_groups(self) -> dict[str, str]:
        return dict(self._failed)

    def __len__(self) -> int:
        return sum(len(group.resources) for group in self._groups)

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def server_preferred_resources(self) -> tuple[APIResourceGroup, ...]:
        """Return the preferred group/version list of every group.

        Raises GroupDiscoveryFailedError carrying the partial result when
        some group/versions could not be listed at load time.
        """
        if self._failed:
            raise GroupDiscoveryFailedError(self._preferred, self._failed)
        return self._preferred

    # ------------------------------------------------------------------
    # Exact lookups
    # ------------------------------------------------------------------

    def _lists_for(
        self,
        group: str | None,
        version: str,
        *,
        preferred_only: bool,
    ) -> Iterable[tuple[GroupVersion, APIResourceGroup]]:
        source = self._preferred if preferred_only else self._groups
        for item in source:
            gv = _parse_or_none(item.group_version)
            if gv is None:
                continue
            if group is not None and gv.group != group:
                continue
            if version and gv.version != version:
                continue
            yield gv, item

    def resource_for(self, partial: GroupVersionResource) -> GroupVersionResource:
        """Complete a partial GVR by plural or singular resource name.

        An empty group matches every group and an empty version selects the
        preferred version. Matches in more than one group are ambiguous.
        """
        name = partial.resource.lower()
        if not name:
            raise ResourceNotFoundError(f'"{partial.resource}"')
        group_filter = partial.group or None

        matches: dict[str, GroupVersionResource] = {}
        labels: list[str] = []
        for gv, item in self._lists_for(group_filter, partial.version, preferred_only=not partial.version):
            for entry in item.resources:
                if not _names_resource(entry, name):
                    continue
                if gv.group not in matches:
                    matches[gv.group] = GroupVersionResource(gv.group, gv.version, entry.name)
                    labels.append(f"{item.group_version}/{entry.name}")
                break

        if not matches:
            raise ResourceNotFoundError(f'"{partial.resource}"')
        if len(matches) > 1:
            raise AmbiguousResourceError(labels)
        return next(iter(matches.values()))

    def kind_for(self, gvr: GroupVersionResource) -> GroupVersionKind:
        for gv, item in self._lists_for(gvr.group, gvr.version, preferred_only=not gvr.version):
            for entry in item.resources:
                if entry.name == gvr.resource:
                    return GroupVersionKind(gv.group, gv.version, entry.kind)
        raise ResourceNotFoundError(f'"{gvr}"')

    def rest_mapping(self, group: str, kind: str, version: str = "") -> CanonicalResourceType:
        """Map a group/kind (and optional version) to its resource type and scope."""
        if version:
            source = self._lists_for(group, version, preferred_only=False)
        else:
            source = self._all_versions(group)
        for gv, item in source:
            for entry in item.resources:
                if entry.kind == kind and not entry.is_subresource and entry.name:
                    return CanonicalResourceType(
                        gvr=GroupVersionResource(gv.group, gv.version, entry.name),
                        namespaced=entry.namespaced,
                    )
        target = f"{group}/{kind}" if group else kind
        if version:
            target = f"{target} in version {version}"
        raise ResourceNotFoundError(f'kind "{target}"')

    def _all_versions(self, group: str) -> Iterable[tuple[GroupVersion, APIResourceGroup]]:
        # Preferred version first, then any other served version.
        preferred = list(self._lists_for(group, "", preferred_only=True))
        yield from preferred
        seen = {item.group_version for _, item in preferred}
        for gv, item in self._lists_for(group, "", preferred_only=False):
            if item.group_version not in seen:
                yield gv, item
