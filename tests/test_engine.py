from __future__ import annotations

import pytest

from netdiag.config import Settings
from netdiag.probe_lib.engine import NetworkDiagnosticsEngine, build_engine
from netdiag.probe_lib.models import ErrorKind, ProbeConfig, ProbeResult


class RecordingStrategy:
    name = "recording"

    def __init__(self, success: bool) -> None:
        self._success = success
        self.calls: list[tuple[str, float]] = []

    async def probe(self, target: str, timeout_seconds: float, packet_size: int) -> ProbeResult:
        del packet_size
        self.calls.append((target, timeout_seconds))
        if self._success:
            return ProbeResult.succeeded(target, 15)
        return ProbeResult.failed(target, "timed out", ErrorKind.TIMEOUT)


def _engine(success: bool) -> tuple[NetworkDiagnosticsEngine, RecordingStrategy]:
    strategy = RecordingStrategy(success)
    engine = NetworkDiagnosticsEngine(
        strategy,
        default_config=ProbeConfig(
            attempts=2, interval_seconds=0, retries=0, retry_interval_seconds=0
        ),
        reference_host="1.1.1.1",
    )
    return engine, strategy


@pytest.mark.asyncio
async def test_ping_uses_default_config_and_strips_target() -> None:
    engine, strategy = _engine(success=True)

    results = await engine.ping("  8.8.8.8 ")

    assert len(results) == 2
    assert all(item.success for item in results)
    assert all(isinstance(item.latency_ms, int) and item.latency_ms >= 0 for item in results)
    assert [target for target, _ in strategy.calls] == ["8.8.8.8", "8.8.8.8"]


@pytest.mark.asyncio
async def test_ping_rejects_empty_target() -> None:
    engine, strategy = _engine(success=True)

    with pytest.raises(ValueError):
        await engine.ping("   ")
    assert strategy.calls == []


@pytest.mark.asyncio
async def test_ping_with_unresolvable_host_reports_failures() -> None:
    engine, _ = _engine(success=False)
    config = ProbeConfig(attempts=2, interval_seconds=0, retries=1, retry_interval_seconds=0)

    results = await engine.ping("invalid.nonexistent.test", config)
    stats = engine.analyze_ping_results(results)

    assert len(results) == 2
    assert stats.failed_count == 2
    assert stats.loss_rate_percent == 100.0


@pytest.mark.asyncio
async def test_is_network_connected_probes_reference_host_once() -> None:
    engine, strategy = _engine(success=True)
    assert await engine.is_network_connected() is True
    assert strategy.calls == [("1.1.1.1", 3.0)]

    engine, strategy = _engine(success=False)
    assert await engine.is_network_connected() is False
    assert len(strategy.calls) == 1


def test_build_engine_from_settings() -> None:
    engine = build_engine(Settings(probe_strategy="http", probe_attempts=7))

    assert engine.strategy_name == "http"
    assert engine.default_config.attempts == 7
