"""Resolution error taxonomy.

The messages of ResourceNotFoundError and AmbiguousResourceError are shown
verbatim to the human or agent that issued the call, so they always name
what was searched for and, for ambiguity, every candidate.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from rootcause.models.resources import APIResourceGroup


class ResolutionError(Exception):
    """Base class for resource type resolution failures."""

    retriable = False


class InvalidInputError(ResolutionError):
    """The caller supplied too little identifying information."""


class ResourceNotFoundError(ResolutionError):
    """No resource type known to discovery matches the query."""

    def __init__(self, query: str, message: str | None = None) -> None:
        super().__init__(message or f"no matching resource found for {query}")
        self.query = query


class AmbiguousResourceError(ResolutionError):
    """More than one resource type matches; the caller must disambiguate."""

    def __init__(self, candidates: Iterable[str]) -> None:
        self.candidates: tuple[str, ...] = tuple(sorted(set(candidates)))
        super().__init__(
            "multiple matches found; specify apiVersion or group: " + ", ".join(self.candidates)
        )


class DiscoveryUnavailableError(ResolutionError):
    """The discovery snapshot could not be read or refreshed."""

    retriable = True


class GroupDiscoveryFailedError(DiscoveryUnavailableError):
    """Some API groups could not be listed.

    ``groups`` carries the partial result that was listed successfully;
    ``failures`` maps each failed group/version to the reason.
    """

    def __init__(
        self,
        groups: Sequence[APIResourceGroup],
        failures: Mapping[str, str],
    ) -> None:
        self.groups: tuple[APIResourceGroup, ...] = tuple(groups)
        self.failures: dict[str, str] = dict(failures)
        failed = ", ".join(f"{gv}: {reason}" for gv, reason in sorted(self.failures.items()))
        super().__init__(f"unable to retrieve the complete list of server APIs: {failed}")
