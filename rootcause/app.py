"""Application bootstrap for rootcause.

Wires the components in dependency order and manages their asyncio
lifecycle. Startup order: config → logging → K8s client → discovery cache
→ resolver → resource reader. Shutdown runs in reverse.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from rootcause import __version__
from rootcause.config import load_config
from rootcause.kube.clients import DiscoveryCache, build_api_client
from rootcause.kube.errors import DiscoveryUnavailableError
from rootcause.kube.resolver import Resolver
from rootcause.models.config import RootCauseConfig
from rootcause.observability.logging import get_logger, setup_logging
from rootcause.ops import ResourceReader, api_client_fetch

if TYPE_CHECKING:
    import structlog


class ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class RootCauseApp:
    """Application root. Owns the API client, discovery cache and reader.

    ``stop()`` is safe to call on an app that was never started or is
    already stopped.
    """

    def __init__(self, config: RootCauseConfig | None = None) -> None:
        self.config = config
        self._api_client: Any = None
        self._discovery: DiscoveryCache | None = None
        self._resolver: Resolver | None = None
        self._reader: ResourceReader | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._log: structlog.stdlib.BoundLogger | None = None

    @property
    def resolver(self) -> Resolver:
        if self._resolver is None:
            raise RuntimeError("rootcause app is not started")
        return self._resolver

    @property
    def reader(self) -> ResourceReader:
        if self._reader is None:
            raise RuntimeError("rootcause app is not started")
        return self._reader

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises ComponentError if the client cannot be configured or the
        first discovery load fails.
        """
        if self.config is None:
            self.config = load_config()

        setup_logging(self.config.log.level)
        self._log = get_logger("app")
        self._log.info("rootcause starting", version=__version__)

        try:
            self._api_client = await build_api_client(self.config.kube)
        except Exception as exc:
            raise ComponentError("k8s_client", exc) from exc

        discovery = DiscoveryCache.for_api_client(
            self._api_client,
            ttl_seconds=self.config.discovery.refresh_ttl_seconds,
            timeout_seconds=self.config.discovery.timeout_seconds,
        )
        try:
            await discovery.load()
        except DiscoveryUnavailableError as exc:
            await self._close_api_client()
            raise ComponentError("discovery", exc) from exc
        self._discovery = discovery

        if self.config.discovery.refresh_ttl_seconds > 0:
            self._refresh_task = asyncio.create_task(discovery.run(), name="discovery-refresh")

        self._resolver = Resolver(discovery, discovery)
        self._reader = ResourceReader(
            self._resolver,
            api_client_fetch(self._api_client, timeout_seconds=self.config.discovery.timeout_seconds),
        )
        self._log.info("rootcause started", resources=len(discovery.snapshot))

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Stop the refresh loop and close the API client."""
        if self._log is None:
            return
        self._log.info("rootcause shutting down")

        if self._refresh_task is not None:
            self._refresh_task.cancel()
            await asyncio.gather(self._refresh_task, return_exceptions=True)
            self._refresh_task = None

        self._reader = None
        self._resolver = None
        self._discovery = None
        await self._close_api_client()
        self._log.info("rootcause stopped")

    async def _close_api_client(self) -> None:
        if self._api_client is None:
            return
        try:
            await self._api_client.close()
        except Exception as exc:
            assert self._log is not None
            self._log.warning("error closing k8s client", error=str(exc))
        self._api_client = None
