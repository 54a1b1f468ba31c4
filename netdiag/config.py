from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv

from netdiag.probe_lib.models import ProbeConfig


STRATEGY_CHOICES = ("auto", "socket", "http")


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    probe_strategy: str = "auto"
    probe_timeout_seconds: float = 5.0
    probe_attempts: int = 4
    probe_interval_seconds: float = 1.0
    probe_packet_size: int = 64
    probe_retries: int = 2
    probe_retry_interval_seconds: float = 2.0
    reference_host: str = "8.8.8.8"
    connectivity_timeout_seconds: float = 3.0
    dns_check_timeout_seconds: float = 2.0
    reachability_timeout_seconds: float = 2.0

    def probe_config(self) -> ProbeConfig:
        return ProbeConfig(
            timeout_seconds=self.probe_timeout_seconds,
            attempts=self.probe_attempts,
            interval_seconds=self.probe_interval_seconds,
            packet_size=self.probe_packet_size,
            retries=self.probe_retries,
            retry_interval_seconds=self.probe_retry_interval_seconds,
        )


def _read_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: expected an integer.") from exc


def _read_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: expected a number of seconds.") from exc


def _read_strategy(name: str, default: str) -> str:
    raw = os.getenv(name, default).strip().lower() or default
    if raw not in STRATEGY_CHOICES:
        raise ValueError(
            f"Invalid {name}: expected one of {', '.join(STRATEGY_CHOICES)}."
        )
    return raw


def load_settings() -> Settings:
    # Ensure local .env values win over stale shell/system environment values.
    load_dotenv(override=True)

    return Settings(
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        probe_strategy=_read_strategy("PROBE_STRATEGY", "auto"),
        probe_timeout_seconds=_read_float("PROBE_TIMEOUT_SECONDS", 5.0),
        probe_attempts=_read_int("PROBE_ATTEMPTS", 4),
        probe_interval_seconds=_read_float("PROBE_INTERVAL_SECONDS", 1.0),
        probe_packet_size=_read_int("PROBE_PACKET_SIZE", 64),
        probe_retries=_read_int("PROBE_RETRIES", 2),
        probe_retry_interval_seconds=_read_float("PROBE_RETRY_INTERVAL_SECONDS", 2.0),
        reference_host=os.getenv("REFERENCE_HOST", "8.8.8.8").strip() or "8.8.8.8",
        connectivity_timeout_seconds=_read_float("CONNECTIVITY_TIMEOUT_SECONDS", 3.0),
        dns_check_timeout_seconds=_read_float("DNS_CHECK_TIMEOUT_SECONDS", 2.0),
        reachability_timeout_seconds=_read_float("REACHABILITY_TIMEOUT_SECONDS", 2.0),
    )
