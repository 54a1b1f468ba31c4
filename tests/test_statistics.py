from __future__ import annotations

from netdiag.probe_lib.models import ErrorKind, ProbeResult, Statistics
from netdiag.probe_lib.statistics import analyze


def _ok(latency: int) -> ProbeResult:
    return ProbeResult.succeeded("host.test", latency)


def _fail(kind: ErrorKind) -> ProbeResult:
    return ProbeResult.failed("host.test", "failed", kind)


def test_analyze_empty_results() -> None:
    stats = analyze([])

    assert stats == Statistics()
    assert stats.total == 0
    assert stats.loss_rate_percent == 0.0
    assert stats.min_latency_ms is None
    assert stats.avg_latency_ms is None
    assert stats.error_kind_histogram == {}


def test_analyze_mixed_results() -> None:
    results = [
        _ok(10),
        _fail(ErrorKind.TIMEOUT),
        _ok(20),
        _fail(ErrorKind.HOST_NOT_FOUND),
        _ok(31),
    ]
    stats = analyze(results)

    assert stats.total == 5
    assert stats.success_count == 3
    assert stats.failed_count == 2
    assert stats.success_count + stats.failed_count == stats.total
    assert stats.loss_rate_percent == 40.0
    assert stats.min_latency_ms == 10
    assert stats.max_latency_ms == 31
    assert stats.avg_latency_ms == 20.3
    assert stats.min_latency_ms <= stats.avg_latency_ms <= stats.max_latency_ms
    assert stats.error_kind_histogram == {
        ErrorKind.TIMEOUT: 1,
        ErrorKind.HOST_NOT_FOUND: 1,
    }
    assert ErrorKind.OTHER not in stats.error_kind_histogram


def test_analyze_without_successes_has_no_latency() -> None:
    stats = analyze([_fail(ErrorKind.TIMEOUT), _fail(ErrorKind.TIMEOUT)])

    assert stats.loss_rate_percent == 100.0
    assert stats.min_latency_ms is None
    assert stats.max_latency_ms is None
    assert stats.avg_latency_ms is None
    assert stats.error_kind_histogram == {ErrorKind.TIMEOUT: 2}


def test_analyze_rounds_loss_rate_to_one_decimal() -> None:
    stats = analyze([_ok(1), _ok(2), _fail(ErrorKind.OTHER)])

    assert stats.loss_rate_percent == 33.3
    assert stats.avg_latency_ms == 1.5


def test_statistics_to_dict_uses_kind_names() -> None:
    payload = analyze([_ok(4), _fail(ErrorKind.NETWORK_UNREACHABLE)]).to_dict()

    assert payload["total"] == 2
    assert payload["loss_rate_percent"] == 50.0
    assert payload["error_kind_histogram"] == {"networkUnreachable": 1}


def test_analyze_rounds_exact_halves_up() -> None:
    loss = analyze([_ok(5)] * 15 + [_fail(ErrorKind.TIMEOUT)])
    latency = analyze([_ok(1), _ok(1), _ok(1), _ok(2)])

    assert loss.loss_rate_percent == 6.3
    assert latency.avg_latency_ms == 1.3
