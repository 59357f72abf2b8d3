"""Resource identity data structures.

Value types shared by the discovery snapshot, the resolver and the
operation handlers. Every type is immutable; sequences are tuples so that a
snapshot can be read concurrently while a newer one is being built.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class ResourceIdentifier:
    """A loosely-specified resource type as typed by a human or an agent.

    Any subset of fields may be set. ``resource`` may be a plural, singular
    or short name, optionally group-qualified (``deployments.apps``).
    """

    api_version: str = ""
    kind: str = ""
    resource: str = ""
    group: str = ""

    @classmethod
    def from_args(cls, args: Mapping[str, object]) -> ResourceIdentifier:
        """Build an identifier from tool arguments using their wire names."""

        def _str(key: str) -> str:
            value = args.get(key)
            return value.strip() if isinstance(value, str) else ""

        return cls(
            api_version=_str("apiVersion"),
            kind=_str("kind"),
            resource=_str("resource"),
            group=_str("group"),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.api_version or self.kind or self.resource or self.group)


@dataclass(frozen=True)
class GroupVersion:
    """An API group and version, e.g. ``apps/v1`` or ``v1`` (core group)."""

    group: str
    version: str

    @classmethod
    def parse(cls, value: str) -> GroupVersion:
        """Parse a ``group/version`` string.

        Raises ValueError for strings with more than one ``/`` or an empty
        component.
        """
        if not value:
            return cls(group="", version="")
        parts = value.split("/")
        if len(parts) == 1:
            return cls(group="", version=parts[0])
        if len(parts) == 2 and parts[0] and parts[1]:
            return cls(group=parts[0], version=parts[1])
        raise ValueError(f'unexpected GroupVersion string: "{value}"')

    def __str__(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"


@dataclass(frozen=True)
class GroupVersionResource:
    """The (group, version, plural resource) triple naming a resource type."""

    group: str = ""
    version: str = ""
    resource: str = ""

    @property
    def group_version(self) -> GroupVersion:
        return GroupVersion(group=self.group, version=self.version)

    def __str__(self) -> str:
        return f"{self.group_version}/{self.resource}" if self.version else self.resource


@dataclass(frozen=True)
class GroupVersionKind:
    """The (group, version, kind) triple."""

    group: str
    version: str
    kind: str


def parse_group_resource(value: str) -> tuple[str, str]:
    """Split ``resource.group`` on the first dot into (resource, group)."""
    resource, _, group = value.partition(".")
    return resource, group


@dataclass(frozen=True)
class CanonicalResourceType:
    """A resolved, unambiguous resource type and its scope."""

    gvr: GroupVersionResource
    namespaced: bool

    @property
    def group(self) -> str:
        return self.gvr.group

    @property
    def version(self) -> str:
        return self.gvr.version

    @property
    def resource(self) -> str:
        return self.gvr.resource


@dataclass(frozen=True)
class APIResourceInfo:
    """One resource entry from a discovery resource list."""

    name: str
    kind: str
    namespaced: bool = False
    singular_name: str = ""
    short_names: tuple[str, ...] = ()

    @property
    def is_subresource(self) -> bool:
        return "/" in self.name


@dataclass(frozen=True)
class APIResourceGroup:
    """A discovery resource list for one group/version."""

    group_version: str
    resources: tuple[APIResourceInfo, ...] = ()

    @property
    def parsed(self) -> GroupVersion:
        return GroupVersion.parse(self.group_version)

    @property
    def group(self) -> str:
        return self.parsed.group

    @property
    def version(self) -> str:
        return self.parsed.version


@dataclass(frozen=True)
class Candidate:
    """A resource type matched during a best-effort discovery scan."""

    gvr: GroupVersionResource
    namespaced: bool
    group_version: str

    @property
    def label(self) -> str:
        return f"{self.group_version}/{self.gvr.resource}"
