from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal, ROUND_HALF_UP

from netdiag.probe_lib.models import ErrorKind, ProbeResult, Statistics


def _round_tenth(value: float) -> float:
    # Halves round up: 6.25 -> 6.3.
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def analyze(results: Sequence[ProbeResult]) -> Statistics:
    if not results:
        return Statistics()

    successful = [item for item in results if item.success]
    failed = [item for item in results if not item.success]

    min_latency: int | None = None
    max_latency: int | None = None
    avg_latency: float | None = None
    latencies = [item.latency_ms for item in successful if item.latency_ms is not None]
    if latencies:
        min_latency = min(latencies)
        max_latency = max(latencies)
        avg_latency = _round_tenth(sum(latencies) / len(latencies))

    histogram: dict[ErrorKind, int] = {}
    for item in failed:
        if item.error_kind is not None:
            histogram[item.error_kind] = histogram.get(item.error_kind, 0) + 1

    return Statistics(
        total=len(results),
        success_count=len(successful),
        failed_count=len(failed),
        loss_rate_percent=_round_tenth(len(failed) / len(results) * 100),
        min_latency_ms=min_latency,
        max_latency_ms=max_latency,
        avg_latency_ms=avg_latency,
        error_kind_histogram=histogram,
    )
