from __future__ import annotations

import asyncio
from collections.abc import Sequence
import logging
from typing import TYPE_CHECKING

from netdiag.probe_lib.base import ProbeStrategy
from netdiag.probe_lib.diagnostician import FailureDiagnostician
from netdiag.probe_lib.models import (
    Diagnosis,
    ErrorKind,
    ProbeConfig,
    ProbeResult,
    Statistics,
)
from netdiag.probe_lib.orchestrator import PingOrchestrator, ProgressCallback
from netdiag.probe_lib.runner import RetryingProbeRunner
from netdiag.probe_lib.statistics import analyze
from netdiag.probe_lib.strategies import select_strategy

if TYPE_CHECKING:
    from netdiag.config import Settings


class NetworkDiagnosticsEngine:
    def __init__(
        self,
        strategy: ProbeStrategy,
        *,
        default_config: ProbeConfig | None = None,
        reference_host: str = "8.8.8.8",
        connectivity_timeout_seconds: float = 3.0,
        dns_check_timeout_seconds: float = 2.0,
        reachability_timeout_seconds: float = 2.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._default_config = default_config or ProbeConfig()
        self._reference_host = reference_host
        self._connectivity_timeout_seconds = connectivity_timeout_seconds
        self._runner = RetryingProbeRunner(strategy, logger=self._logger)
        self._orchestrator = PingOrchestrator(self._runner, logger=self._logger)
        self._diagnostician = FailureDiagnostician(
            self._runner,
            reference_host=reference_host,
            connectivity_timeout_seconds=connectivity_timeout_seconds,
            dns_check_timeout_seconds=dns_check_timeout_seconds,
            reachability_timeout_seconds=reachability_timeout_seconds,
            logger=self._logger,
        )

    @property
    def strategy_name(self) -> str:
        return self._runner.strategy.name

    @property
    def default_config(self) -> ProbeConfig:
        return self._default_config

    async def ping(
        self,
        target: str,
        config: ProbeConfig | None = None,
        on_progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[ProbeResult]:
        host = _normalize_target(target)
        return await self._orchestrator.ping(
            host,
            config or self._default_config,
            on_progress=on_progress,
            cancel_event=cancel_event,
        )

    @staticmethod
    def analyze_ping_results(results: Sequence[ProbeResult]) -> Statistics:
        return analyze(results)

    async def diagnose_failure(
        self,
        error_kind: ErrorKind,
        error_message: str,
        target: str,
    ) -> Diagnosis:
        host = _normalize_target(target)
        return await self._diagnostician.diagnose(error_kind, error_message, host)

    async def is_network_connected(self) -> bool:
        config = ProbeConfig(
            timeout_seconds=self._connectivity_timeout_seconds,
            attempts=1,
            retries=0,
        )
        result = await self._runner.run_with_retry(self._reference_host, config)
        return result.success


def build_engine(
    settings: Settings,
    logger: logging.Logger | None = None,
) -> NetworkDiagnosticsEngine:
    log = logger or logging.getLogger("netdiag.engine")
    strategy = select_strategy(settings.probe_strategy, logger=log)
    return NetworkDiagnosticsEngine(
        strategy,
        default_config=settings.probe_config(),
        reference_host=settings.reference_host,
        connectivity_timeout_seconds=settings.connectivity_timeout_seconds,
        dns_check_timeout_seconds=settings.dns_check_timeout_seconds,
        reachability_timeout_seconds=settings.reachability_timeout_seconds,
        logger=log,
    )


def _normalize_target(raw_target: str) -> str:
    target = (raw_target or "").strip()
    if not target:
        raise ValueError("Target host is empty.")
    return target
