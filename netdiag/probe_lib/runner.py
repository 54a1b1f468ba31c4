from __future__ import annotations

import asyncio
import logging

from netdiag.probe_lib.base import ProbeStrategy
from netdiag.probe_lib.classifier import classify
from netdiag.probe_lib.models import ProbeConfig, ProbeResult
from netdiag.probe_lib.strategies import describe_fault


class RetryingProbeRunner:
    def __init__(
        self,
        strategy: ProbeStrategy,
        logger: logging.Logger | None = None,
    ) -> None:
        self._strategy = strategy
        self._logger = logger or logging.getLogger(__name__)

    @property
    def strategy(self) -> ProbeStrategy:
        return self._strategy

    async def run_with_retry(self, target: str, config: ProbeConfig) -> ProbeResult:
        result = await self._probe_once(target, config)
        retry = 0
        while not result.success and retry < config.retries:
            retry += 1
            self._logger.warning(
                "probe failed, retrying (%s/%s)",
                retry,
                config.retries,
                extra={
                    "event": "probe_retry",
                    "target": target,
                    "error_kind": result.error_kind.value if result.error_kind else None,
                },
            )
            await asyncio.sleep(config.retry_interval_seconds)
            retry_result = await self._probe_once(target, config)
            if retry_result.success:
                self._logger.info(
                    "retry %s succeeded",
                    retry,
                    extra={
                        "event": "probe_retry_ok",
                        "target": target,
                        "latency_ms": retry_result.latency_ms,
                    },
                )
                return retry_result
            result = retry_result
        return result

    async def _probe_once(self, target: str, config: ProbeConfig) -> ProbeResult:
        try:
            return await self._strategy.probe(
                target, config.timeout_seconds, config.packet_size
            )
        except Exception as exc:
            # Strategies should not raise; a misbehaving one still yields data.
            self._logger.exception(
                "probe strategy raised",
                extra={"event": "probe_error", "target": target},
            )
            return ProbeResult.failed(target, describe_fault(exc), classify(exc))
