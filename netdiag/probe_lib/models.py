from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


MAX_PACKET_SIZE = 65500


class ErrorKind(str, Enum):
    TIMEOUT = "timeout"
    HOST_NOT_FOUND = "hostNotFound"
    NETWORK_UNREACHABLE = "networkUnreachable"
    PERMISSION_DENIED = "permissionDenied"
    OTHER = "other"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProbeConfig:
    timeout_seconds: float = 5.0
    attempts: int = 4
    interval_seconds: float = 1.0
    packet_size: int = 64
    retries: int = 2
    retry_interval_seconds: float = 2.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1.")
        if self.retries < 0:
            raise ValueError("retries must be >= 0.")
        for name in ("timeout_seconds", "interval_seconds", "retry_interval_seconds"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0.")
        object.__setattr__(
            self, "packet_size", min(max(0, int(self.packet_size)), MAX_PACKET_SIZE)
        )


@dataclass(frozen=True)
class ProbeResult:
    target: str
    success: bool
    latency_ms: int | None = None
    error_message: str | None = None
    error_kind: ErrorKind | None = None
    timestamp: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if self.success:
            if self.latency_ms is None:
                raise ValueError("successful result requires latency_ms.")
            if self.error_message is not None or self.error_kind is not None:
                raise ValueError("successful result cannot carry an error.")
        else:
            if self.error_kind is None or self.error_message is None:
                raise ValueError("failed result requires error_kind and error_message.")
            if self.latency_ms is not None:
                raise ValueError("failed result cannot carry latency_ms.")

    @classmethod
    def succeeded(cls, target: str, latency_ms: int) -> ProbeResult:
        return cls(target=target, success=True, latency_ms=max(0, int(latency_ms)))

    @classmethod
    def failed(cls, target: str, error_message: str, error_kind: ErrorKind) -> ProbeResult:
        return cls(
            target=target,
            success=False,
            error_message=error_message,
            error_kind=error_kind,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target,
            "success": self.success,
            "latency_ms": self.latency_ms,
            "error_message": self.error_message,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class Statistics:
    total: int = 0
    success_count: int = 0
    failed_count: int = 0
    loss_rate_percent: float = 0.0
    min_latency_ms: int | None = None
    max_latency_ms: int | None = None
    avg_latency_ms: float | None = None
    error_kind_histogram: dict[ErrorKind, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "success_count": self.success_count,
            "failed_count": self.failed_count,
            "loss_rate_percent": self.loss_rate_percent,
            "min_latency_ms": self.min_latency_ms,
            "max_latency_ms": self.max_latency_ms,
            "avg_latency_ms": self.avg_latency_ms,
            "error_kind_histogram": {
                kind.value: count for kind, count in self.error_kind_histogram.items()
            },
        }


@dataclass(frozen=True)
class CheckOutcome:
    """Outcome of one auxiliary diagnostic check, before it is coerced to a bool."""

    ok: bool
    reason: str | None = None


@dataclass(frozen=True)
class Diagnosis:
    timestamp: datetime
    error_kind: ErrorKind
    error_message: str
    has_network_permission: bool
    alternate_protocol_supported: bool
    network_type: str | None
    target_reachable: bool
    suggestions: list[str]
    check_details: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "error_kind": self.error_kind.value,
            "error_message": self.error_message,
            "has_network_permission": self.has_network_permission,
            "alternate_protocol_supported": self.alternate_protocol_supported,
            "network_type": self.network_type,
            "target_reachable": self.target_reachable,
            "suggestions": list(self.suggestions),
            "check_details": dict(self.check_details),
        }
