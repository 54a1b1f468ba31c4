"""Connectivity probing, statistics and failure diagnosis."""

from netdiag.probe_lib.base import ProbeStrategy
from netdiag.probe_lib.classifier import classify
from netdiag.probe_lib.diagnostician import FailureDiagnostician
from netdiag.probe_lib.engine import NetworkDiagnosticsEngine, build_engine
from netdiag.probe_lib.models import (
    CheckOutcome,
    Diagnosis,
    ErrorKind,
    ProbeConfig,
    ProbeResult,
    Statistics,
)
from netdiag.probe_lib.orchestrator import PingOrchestrator
from netdiag.probe_lib.runner import RetryingProbeRunner
from netdiag.probe_lib.statistics import analyze
from netdiag.probe_lib.strategies import (
    HttpProbeStrategy,
    SocketProbeStrategy,
    select_strategy,
)

__all__ = [
    "CheckOutcome",
    "Diagnosis",
    "ErrorKind",
    "FailureDiagnostician",
    "HttpProbeStrategy",
    "NetworkDiagnosticsEngine",
    "PingOrchestrator",
    "ProbeConfig",
    "ProbeResult",
    "ProbeStrategy",
    "RetryingProbeRunner",
    "SocketProbeStrategy",
    "Statistics",
    "analyze",
    "build_engine",
    "classify",
    "select_strategy",
]
