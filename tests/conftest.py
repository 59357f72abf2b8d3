"""Shared fixtures for rootcause tests.

Provides synthetic discovery snapshots so resolver, reader and pipeline
tests can run without touching a real Kubernetes API server.
"""

from __future__ import annotations

import pytest

from rootcause.kube.discovery import DiscoverySnapshot
from rootcause.models.resources import APIResourceGroup, APIResourceInfo

# ---------------------------------------------------------------------------
# Resource list builders
# ---------------------------------------------------------------------------


def core_v1() -> APIResourceGroup:
    return APIResourceGroup(
        group_version="v1",
        resources=(
            APIResourceInfo("pods", "Pod", namespaced=True, singular_name="pod", short_names=("po",)),
            APIResourceInfo("pods/log", "Pod", namespaced=True),
            APIResourceInfo("nodes", "Node", namespaced=False, singular_name="node", short_names=("no",)),
            APIResourceInfo("namespaces", "Namespace", namespaced=False, singular_name="namespace", short_names=("ns",)),
            APIResourceInfo("configmaps", "ConfigMap", namespaced=True, singular_name="configmap", short_names=("cm",)),
            APIResourceInfo("secrets", "Secret", namespaced=True, singular_name="secret"),
        ),
    )


def apps_v1() -> APIResourceGroup:
    return APIResourceGroup(
        group_version="apps/v1",
        resources=(
            APIResourceInfo(
                "deployments", "Deployment", namespaced=True, singular_name="deployment", short_names=("deploy",)
            ),
            APIResourceInfo("deployments/scale", "Scale", namespaced=True),
            APIResourceInfo("replicasets", "ReplicaSet", namespaced=True, singular_name="replicaset", short_names=("rs",)),
        ),
    )


def widget_groups() -> tuple[APIResourceGroup, ...]:
    """Two unrelated groups that both serve a ``Widget`` kind.

    example.com also serves an older v1beta1 that is not preferred and is
    the only version exposing ``gadgets``.
    """
    return (
        APIResourceGroup(
            group_version="example.com/v1",
            resources=(
                APIResourceInfo("widgets", "Widget", namespaced=True, singular_name="widget", short_names=("wd",)),
            ),
        ),
        APIResourceGroup(
            group_version="example.com/v1beta1",
            resources=(
                APIResourceInfo("widgets", "Widget", namespaced=True, singular_name="widget"),
                APIResourceInfo("gadgets", "Gadget", namespaced=False, singular_name="gadget"),
            ),
        ),
        APIResourceGroup(
            group_version="other.io/v1",
            resources=(APIResourceInfo("widgets", "Widget", namespaced=False, singular_name="widget"),),
        ),
    )


def extensions_v1beta1() -> APIResourceGroup:
    return APIResourceGroup(
        group_version="extensions/v1beta1",
        resources=(APIResourceInfo("deployments", "Deployment", namespaced=True, singular_name="deployment"),),
    )


# ---------------------------------------------------------------------------
# Snapshot fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def snapshot() -> DiscoverySnapshot:
    """Core, apps and the two Widget groups; every group listed successfully."""
    return DiscoverySnapshot((core_v1(), apps_v1(), *widget_groups()))


@pytest.fixture
def legacy_snapshot() -> DiscoverySnapshot:
    """Deployments served by both apps/v1 and extensions/v1beta1."""
    return DiscoverySnapshot((core_v1(), apps_v1(), extensions_v1beta1()))


@pytest.fixture
def partial_snapshot() -> DiscoverySnapshot:
    """A snapshot where one aggregated group could not be listed."""
    return DiscoverySnapshot(
        (core_v1(), apps_v1()),
        failed_groups={"metrics.k8s.io/v1beta1": "the server is currently unable to handle the request"},
    )
