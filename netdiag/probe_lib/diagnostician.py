from __future__ import annotations

from collections.abc import Awaitable
import logging

from netdiag.probe_lib.models import (
    CheckOutcome,
    Diagnosis,
    ErrorKind,
    ProbeConfig,
    utc_now,
)
from netdiag.probe_lib.runner import RetryingProbeRunner
from netdiag.probe_lib.strategies import (
    CANDIDATE_PORTS,
    describe_fault,
    detect_network_type,
    tcp_connect,
)


DNS_PORT = 53

GENERIC_SUGGESTIONS = (
    "Check that the device is connected to a network",
    "Try restarting the app",
)

KIND_SUGGESTIONS: dict[ErrorKind, tuple[str, ...]] = {
    ErrorKind.TIMEOUT: (
        "Increase the timeout setting",
        "Check the quality of the network connection",
        "Try connecting through another network",
    ),
    ErrorKind.HOST_NOT_FOUND: (
        "Check that the target address is spelled correctly",
        "Check that the DNS configuration is working",
        "Try using the IP address instead of the domain name",
    ),
    ErrorKind.NETWORK_UNREACHABLE: (
        "Check that the local network connection is working",
        "Try restarting the router or modem",
        "Contact your network service provider",
    ),
    ErrorKind.PERMISSION_DENIED: (
        "Check that the app is allowed to access the network",
        "Enable network access for the app in the device settings",
    ),
    ErrorKind.OTHER: (
        "Check the error details",
        "Try the test again later",
    ),
}

NO_PERMISSION_SUGGESTIONS = ("Make sure the app has network access permission",)
NO_ALTERNATE_PROTOCOL_SUGGESTIONS = (
    "The current network may block non-HTTP connections",
    "Try a different network environment",
)
TARGET_UNREACHABLE_SUGGESTIONS = (
    "The target server may be down",
    "Check the status of the target server",
    "Try a different target address",
)


def build_suggestions(
    error_kind: ErrorKind,
    *,
    has_network_permission: bool,
    alternate_protocol_supported: bool,
    target_reachable: bool,
) -> list[str]:
    suggestions = list(GENERIC_SUGGESTIONS)
    suggestions.extend(KIND_SUGGESTIONS.get(error_kind, KIND_SUGGESTIONS[ErrorKind.OTHER]))
    if not has_network_permission:
        suggestions.extend(NO_PERMISSION_SUGGESTIONS)
    if not alternate_protocol_supported:
        suggestions.extend(NO_ALTERNATE_PROTOCOL_SUGGESTIONS)
    if not target_reachable:
        suggestions.extend(TARGET_UNREACHABLE_SUGGESTIONS)
    return suggestions


class FailureDiagnostician:
    def __init__(
        self,
        runner: RetryingProbeRunner,
        *,
        reference_host: str = "8.8.8.8",
        connectivity_timeout_seconds: float = 3.0,
        dns_check_timeout_seconds: float = 2.0,
        reachability_timeout_seconds: float = 2.0,
        ports: tuple[int, ...] = CANDIDATE_PORTS,
        logger: logging.Logger | None = None,
    ) -> None:
        self._runner = runner
        self._reference_host = reference_host
        self._connectivity_timeout_seconds = connectivity_timeout_seconds
        self._dns_check_timeout_seconds = dns_check_timeout_seconds
        self._reachability_timeout_seconds = reachability_timeout_seconds
        self._ports = tuple(ports)
        self._logger = logger or logging.getLogger(__name__)

    async def diagnose(
        self,
        error_kind: ErrorKind,
        error_message: str,
        target: str,
    ) -> Diagnosis:
        self._logger.info(
            "diagnosing failure",
            extra={"event": "diagnose_start", "target": target, "error_kind": error_kind.value},
        )
        # Checks run one after another; a failed check only flips its own field.
        checks: dict[str, CheckOutcome] = {}
        checks["network_permission"] = await self._guard(
            "network_permission", self.check_network_permission()
        )
        checks["alternate_protocol"] = await self._guard(
            "alternate_protocol", self.check_alternate_protocol()
        )
        network_type = self._network_type()
        checks["target_reachable"] = await self._guard(
            "target_reachable", self.check_target_reachable(target)
        )

        has_network_permission = checks["network_permission"].ok
        alternate_protocol_supported = checks["alternate_protocol"].ok
        target_reachable = checks["target_reachable"].ok
        suggestions = build_suggestions(
            error_kind,
            has_network_permission=has_network_permission,
            alternate_protocol_supported=alternate_protocol_supported,
            target_reachable=target_reachable,
        )
        diagnosis = Diagnosis(
            timestamp=utc_now(),
            error_kind=error_kind,
            error_message=error_message,
            has_network_permission=has_network_permission,
            alternate_protocol_supported=alternate_protocol_supported,
            network_type=network_type,
            target_reachable=target_reachable,
            suggestions=suggestions,
            check_details={
                name: outcome.reason or "failed"
                for name, outcome in checks.items()
                if not outcome.ok
            },
        )
        self._logger.info(
            "diagnosis finished with %s suggestions",
            len(suggestions),
            extra={"event": "diagnose_end", "target": target, "status": "ok"},
        )
        return diagnosis

    async def check_network_permission(self) -> CheckOutcome:
        config = ProbeConfig(
            timeout_seconds=self._connectivity_timeout_seconds,
            attempts=1,
            retries=0,
        )
        result = await self._runner.run_with_retry(self._reference_host, config)
        if result.success:
            return CheckOutcome(ok=True)
        return CheckOutcome(ok=False, reason=result.error_message)

    async def check_alternate_protocol(self) -> CheckOutcome:
        await tcp_connect(
            self._reference_host,
            DNS_PORT,
            timeout_seconds=self._dns_check_timeout_seconds,
            logger=self._logger,
        )
        return CheckOutcome(ok=True)

    async def check_target_reachable(self, target: str) -> CheckOutcome:
        reasons: list[str] = []
        for port in self._ports:
            try:
                await tcp_connect(
                    target,
                    port,
                    timeout_seconds=self._reachability_timeout_seconds,
                    logger=self._logger,
                )
            except Exception as exc:
                reasons.append(f"{port}: {describe_fault(exc)}")
                continue
            return CheckOutcome(ok=True)
        return CheckOutcome(ok=False, reason="; ".join(reasons) or "no ports to try")

    def _network_type(self) -> str:
        try:
            return detect_network_type()
        except Exception:
            return "unknown"

    async def _guard(self, name: str, check: Awaitable[CheckOutcome]) -> CheckOutcome:
        try:
            outcome = await check
        except Exception as exc:
            outcome = CheckOutcome(ok=False, reason=describe_fault(exc))
        self._logger.debug(
            "diagnostic check %s: %s",
            name,
            "ok" if outcome.ok else outcome.reason,
            extra={"event": "diagnose_check", "check": name, "status": "ok" if outcome.ok else "failed"},
        )
        return outcome
