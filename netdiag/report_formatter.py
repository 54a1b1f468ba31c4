from __future__ import annotations

from netdiag.probe_lib.models import Diagnosis, ProbeResult, Statistics


def format_attempt(attempt: int, total: int, result: ProbeResult) -> str:
    if result.success:
        return f"[{attempt}/{total}] OK   {result.target} latency={result.latency_ms}ms"
    kind = result.error_kind.value if result.error_kind else "-"
    return (
        f"[{attempt}/{total}] FAIL {result.target} "
        f"kind={kind} error={result.error_message or '-'}"
    )


def format_statistics(target: str, stats: Statistics) -> str:
    lines = [
        f"--- {target} statistics ---",
        (
            f"{stats.total} attempts, {stats.success_count} ok, "
            f"{stats.failed_count} failed, {stats.loss_rate_percent:.1f}% loss"
        ),
    ]
    if stats.success_count:
        lines.append(
            f"latency min/avg/max = {stats.min_latency_ms}/"
            f"{stats.avg_latency_ms:.1f}/{stats.max_latency_ms} ms"
        )
    else:
        lines.append("latency min/avg/max = -/-/- ms")
    if stats.error_kind_histogram:
        kinds = ", ".join(
            f"{kind.value}={count}" for kind, count in stats.error_kind_histogram.items()
        )
        lines.append(f"errors: {kinds}")
    return "\n".join(lines)


def format_diagnosis(target: str, diagnosis: Diagnosis) -> str:
    lines = [
        f"--- diagnosis for {target} ---",
        f"error: {diagnosis.error_kind.value} ({diagnosis.error_message or '-'})",
        f"network permission: {_yes_no(diagnosis.has_network_permission)}",
        f"non-HTTP transport: {_yes_no(diagnosis.alternate_protocol_supported)}",
        f"network type: {diagnosis.network_type or 'unknown'}",
        f"target reachable: {_yes_no(diagnosis.target_reachable)}",
        "suggestions:",
    ]
    lines.extend(
        f"  {index}. {item}" for index, item in enumerate(diagnosis.suggestions, start=1)
    )
    return "\n".join(lines)


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"
