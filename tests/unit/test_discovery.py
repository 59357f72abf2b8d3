"""Unit tests for the discovery snapshot and resource identity value types."""

from __future__ import annotations

import pytest

from rootcause.kube.discovery import DiscoverySnapshot
from rootcause.kube.errors import AmbiguousResourceError, GroupDiscoveryFailedError, ResourceNotFoundError
from rootcause.models.resources import (
    APIResourceGroup,
    GroupVersion,
    GroupVersionKind,
    GroupVersionResource,
    ResourceIdentifier,
    parse_group_resource,
)

# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


class TestGroupVersion:
    def test_parse_core(self) -> None:
        assert GroupVersion.parse("v1") == GroupVersion("", "v1")

    def test_parse_group(self) -> None:
        assert GroupVersion.parse("apps/v1") == GroupVersion("apps", "v1")

    def test_parse_empty(self) -> None:
        assert GroupVersion.parse("") == GroupVersion("", "")

    @pytest.mark.parametrize("value", ["a/b/c", "/v1", "apps/"])
    def test_parse_invalid(self, value: str) -> None:
        with pytest.raises(ValueError):
            GroupVersion.parse(value)

    def test_str(self) -> None:
        assert str(GroupVersion("", "v1")) == "v1"
        assert str(GroupVersion("apps", "v1")) == "apps/v1"

    def test_gvr_str(self) -> None:
        assert str(GroupVersionResource("apps", "v1", "deployments")) == "apps/v1/deployments"
        assert str(GroupVersionResource("", "v1", "pods")) == "v1/pods"
        assert str(GroupVersionResource(resource="pods")) == "pods"


class TestParseGroupResource:
    def test_plain_name(self) -> None:
        assert parse_group_resource("pods") == ("pods", "")

    def test_splits_on_first_dot(self) -> None:
        assert parse_group_resource("widgets.example.com") == ("widgets", "example.com")


class TestResourceIdentifierFromArgs:
    def test_wire_names(self) -> None:
        ident = ResourceIdentifier.from_args(
            {"apiVersion": "apps/v1", "kind": "Deployment", "resource": " deploy ", "group": "apps"}
        )
        assert ident == ResourceIdentifier(api_version="apps/v1", kind="Deployment", resource="deploy", group="apps")

    def test_non_string_values_ignored(self) -> None:
        ident = ResourceIdentifier.from_args({"kind": 42, "resource": None, "group": ["apps"]})
        assert ident.is_empty

    def test_missing_args(self) -> None:
        assert ResourceIdentifier.from_args({}).is_empty


# ---------------------------------------------------------------------------
# Snapshot enumeration
# ---------------------------------------------------------------------------


class TestServerPreferredResources:
    def test_first_version_per_group_is_preferred(self, snapshot: DiscoverySnapshot) -> None:
        preferred = snapshot.server_preferred_resources()
        assert [g.group_version for g in preferred] == ["v1", "apps/v1", "example.com/v1", "other.io/v1"]

    def test_partial_failure_carries_available_groups(self, partial_snapshot: DiscoverySnapshot) -> None:
        with pytest.raises(GroupDiscoveryFailedError) as exc_info:
            partial_snapshot.server_preferred_resources()
        err = exc_info.value
        assert [g.group_version for g in err.groups] == ["v1", "apps/v1"]
        assert "metrics.k8s.io/v1beta1" in err.failures
        assert err.retriable is True
        assert str(err).startswith("unable to retrieve the complete list of server APIs: metrics.k8s.io/v1beta1")

    def test_failed_groups_is_a_copy(self, partial_snapshot: DiscoverySnapshot) -> None:
        partial_snapshot.failed_groups.clear()
        assert partial_snapshot.failed_groups

    def test_len_counts_resources(self, snapshot: DiscoverySnapshot) -> None:
        assert len(snapshot) == 6 + 3 + 1 + 2 + 1

    def test_unparsable_group_version_skipped(self) -> None:
        snap = DiscoverySnapshot([APIResourceGroup("a/b/c"), APIResourceGroup("v1")])
        assert [g.group_version for g in snap.server_preferred_resources()] == ["v1"]


# ---------------------------------------------------------------------------
# Exact lookups
# ---------------------------------------------------------------------------


class TestResourceFor:
    def test_plural(self, snapshot: DiscoverySnapshot) -> None:
        assert snapshot.resource_for(GroupVersionResource(resource="pods")) == GroupVersionResource("", "v1", "pods")

    def test_singular_case_insensitive(self, snapshot: DiscoverySnapshot) -> None:
        gvr = snapshot.resource_for(GroupVersionResource(resource="Deployment"))
        assert gvr == GroupVersionResource("apps", "v1", "deployments")

    def test_explicit_version(self, snapshot: DiscoverySnapshot) -> None:
        gvr = snapshot.resource_for(GroupVersionResource("example.com", "v1beta1", "widgets"))
        assert gvr == GroupVersionResource("example.com", "v1beta1", "widgets")

    def test_short_name_is_not_matched(self, snapshot: DiscoverySnapshot) -> None:
        with pytest.raises(ResourceNotFoundError):
            snapshot.resource_for(GroupVersionResource(resource="deploy"))

    def test_subresource_is_not_matched(self, snapshot: DiscoverySnapshot) -> None:
        with pytest.raises(ResourceNotFoundError):
            snapshot.resource_for(GroupVersionResource(resource="deployments/scale"))

    def test_matches_in_two_groups_are_ambiguous(self, snapshot: DiscoverySnapshot) -> None:
        with pytest.raises(AmbiguousResourceError) as exc_info:
            snapshot.resource_for(GroupVersionResource(resource="widget"))
        assert exc_info.value.candidates == ("example.com/v1/widgets", "other.io/v1/widgets")


class TestKindFor:
    def test_kind_of_gvr(self, snapshot: DiscoverySnapshot) -> None:
        gvk = snapshot.kind_for(GroupVersionResource("apps", "v1", "replicasets"))
        assert gvk == GroupVersionKind("apps", "v1", "ReplicaSet")

    def test_unknown_gvr(self, snapshot: DiscoverySnapshot) -> None:
        with pytest.raises(ResourceNotFoundError, match="apps/v1/pods"):
            snapshot.kind_for(GroupVersionResource("apps", "v1", "pods"))


class TestRESTMapping:
    def test_preferred_version(self, snapshot: DiscoverySnapshot) -> None:
        mapping = snapshot.rest_mapping("example.com", "Widget")
        assert mapping.gvr == GroupVersionResource("example.com", "v1", "widgets")
        assert mapping.namespaced is True

    def test_subresource_kind_not_mapped(self, snapshot: DiscoverySnapshot) -> None:
        with pytest.raises(ResourceNotFoundError):
            snapshot.rest_mapping("apps", "Scale", "v1")

    def test_not_found_message(self, snapshot: DiscoverySnapshot) -> None:
        with pytest.raises(ResourceNotFoundError) as exc_info:
            snapshot.rest_mapping("", "Widget")
        assert str(exc_info.value) == 'no matching resource found for kind "Widget"'
