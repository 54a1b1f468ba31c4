from __future__ import annotations

from datetime import datetime, timezone

from netdiag.probe_lib.models import Diagnosis, ErrorKind, ProbeResult
from netdiag.probe_lib.statistics import analyze
from netdiag.report_formatter import (
    format_attempt,
    format_diagnosis,
    format_statistics,
)


def test_format_attempt_success_and_failure() -> None:
    ok = format_attempt(1, 4, ProbeResult.succeeded("example.com", 23))
    failed = format_attempt(
        2, 4, ProbeResult.failed("example.com", "timed out", ErrorKind.TIMEOUT)
    )

    assert ok == "[1/4] OK   example.com latency=23ms"
    assert failed == "[2/4] FAIL example.com kind=timeout error=timed out"


def test_format_statistics_with_and_without_latency() -> None:
    mixed = analyze(
        [
            ProbeResult.succeeded("h", 10),
            ProbeResult.succeeded("h", 15),
            ProbeResult.failed("h", "x", ErrorKind.OTHER),
        ]
    )
    text = format_statistics("h", mixed)
    assert "3 attempts, 2 ok, 1 failed, 33.3% loss" in text
    assert "latency min/avg/max = 10/12.5/15 ms" in text
    assert "errors: other=1" in text

    none_ok = format_statistics("h", analyze([ProbeResult.failed("h", "x", ErrorKind.OTHER)]))
    assert "latency min/avg/max = -/-/- ms" in none_ok


def test_format_diagnosis_numbers_suggestions() -> None:
    diagnosis = Diagnosis(
        timestamp=datetime.now(timezone.utc),
        error_kind=ErrorKind.TIMEOUT,
        error_message="timed out",
        has_network_permission=True,
        alternate_protocol_supported=False,
        network_type="native/linux",
        target_reachable=False,
        suggestions=["first", "second"],
    )
    text = format_diagnosis("example.com", diagnosis)

    assert "error: timeout (timed out)" in text
    assert "network permission: yes" in text
    assert "non-HTTP transport: no" in text
    assert "network type: native/linux" in text
    assert text.endswith("  1. first\n  2. second")
