from __future__ import annotations

from typing import Protocol

from netdiag.probe_lib.models import ProbeResult


class ProbeStrategy(Protocol):
    name: str

    async def probe(self, target: str, timeout_seconds: float, packet_size: int) -> ProbeResult:
        """Run a single physical probe; faults come back as a failed result."""
