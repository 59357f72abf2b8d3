"""Core data structures for rootcause."""

from rootcause.models.config import RootCauseConfig
from rootcause.models.resources import (
    APIResourceGroup,
    APIResourceInfo,
    CanonicalResourceType,
    Candidate,
    GroupVersion,
    GroupVersionKind,
    GroupVersionResource,
    ResourceIdentifier,
    parse_group_resource,
)

__all__ = [
    "APIResourceGroup",
    "APIResourceInfo",
    "CanonicalResourceType",
    "Candidate",
    "GroupVersion",
    "GroupVersionKind",
    "GroupVersionResource",
    "ResourceIdentifier",
    "RootCauseConfig",
    "parse_group_resource",
]
