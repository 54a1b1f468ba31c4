from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging

from netdiag.probe_lib.models import ProbeConfig, ProbeResult
from netdiag.probe_lib.runner import RetryingProbeRunner


ProgressCallback = Callable[[int, ProbeResult], None]


class PingOrchestrator:
    def __init__(
        self,
        runner: RetryingProbeRunner,
        logger: logging.Logger | None = None,
    ) -> None:
        self._runner = runner
        self._logger = logger or logging.getLogger(__name__)

    async def ping(
        self,
        target: str,
        config: ProbeConfig,
        on_progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[ProbeResult]:
        self._logger.info(
            "ping started with %s attempts",
            config.attempts,
            extra={"event": "ping_start", "target": target},
        )
        results: list[ProbeResult] = []
        for attempt in range(1, config.attempts + 1):
            if _is_cancelled(cancel_event):
                self._logger.info(
                    "ping cancelled before attempt %s",
                    attempt,
                    extra={"event": "ping_cancelled", "target": target, "attempt": attempt},
                )
                break
            self._logger.debug(
                "attempt %s/%s",
                attempt,
                config.attempts,
                extra={"event": "ping_attempt", "target": target, "attempt": attempt},
            )
            result = await self._runner.run_with_retry(target, config)
            results.append(result)
            self._notify(on_progress, attempt, result, target)
            if attempt < config.attempts:
                await self._wait_interval(config.interval_seconds, cancel_event)

        success_count = sum(1 for item in results if item.success)
        self._logger.info(
            "ping finished: %s/%s succeeded",
            success_count,
            len(results),
            extra={
                "event": "ping_end",
                "target": target,
                "status": "ok" if success_count == len(results) else "degraded",
            },
        )
        return results

    def _notify(
        self,
        on_progress: ProgressCallback | None,
        attempt: int,
        result: ProbeResult,
        target: str,
    ) -> None:
        if on_progress is None:
            return
        try:
            on_progress(attempt, result)
        except Exception:
            self._logger.exception(
                "progress callback failed",
                extra={"event": "progress_error", "target": target, "attempt": attempt},
            )

    @staticmethod
    async def _wait_interval(
        interval_seconds: float,
        cancel_event: asyncio.Event | None,
    ) -> None:
        if cancel_event is None:
            await asyncio.sleep(interval_seconds)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            pass


def _is_cancelled(cancel_event: asyncio.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()
