from __future__ import annotations

import asyncio
import ipaddress
import logging
import platform
import socket
import sys
from time import perf_counter

import httpx

from netdiag.probe_lib.base import ProbeStrategy
from netdiag.probe_lib.classifier import classify
from netdiag.probe_lib.models import ErrorKind, ProbeResult


CANDIDATE_PORTS: tuple[int, ...] = (80, 443, 53)
HTTP_PADDING_LIMIT = 1024
HTTP_BASE_HEADER_BYTES = 100
PING_SIZE_HEADER = "X-Ping-Size"
STRATEGY_NAMES = ("auto", "socket", "http")


def sockets_available() -> bool:
    # Browser-hosted interpreters only expose fetch-backed HTTP.
    return sys.platform not in {"emscripten", "wasi"}


def detect_network_type() -> str:
    if not sockets_available():
        return "web"
    system = platform.system().strip().lower() or "unknown"
    return f"native/{system}"


def ensure_http_url(target: str) -> str:
    if target.startswith("http://") or target.startswith("https://"):
        return target
    return f"http://{target}"


def describe_fault(exc: BaseException) -> str:
    return str(exc).strip() or exc.__class__.__name__


async def tcp_connect(
    host: str,
    port: int,
    *,
    timeout_seconds: float,
    payload: bytes = b"",
    logger: logging.Logger | None = None,
) -> None:
    log = logger or logging.getLogger(__name__)
    writer: asyncio.StreamWriter | None = None
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=timeout_seconds,
        )
        if payload:
            try:
                writer.write(payload)
                await asyncio.wait_for(writer.drain(), timeout=timeout_seconds)
            except Exception as exc:
                # The handshake already succeeded; the payload is best-effort.
                log.debug(
                    "payload write failed after connect",
                    extra={"event": "payload_write_failed", "target": host, "port": port},
                    exc_info=exc,
                )
    finally:
        if writer is not None:
            writer.close()
            try:
                await writer.wait_closed()
            except Exception:
                pass


class SocketProbeStrategy:
    name = "socket"

    def __init__(
        self,
        ports: tuple[int, ...] = CANDIDATE_PORTS,
        logger: logging.Logger | None = None,
    ) -> None:
        self._ports = tuple(ports)
        self._logger = logger or logging.getLogger(__name__)

    async def probe(self, target: str, timeout_seconds: float, packet_size: int) -> ProbeResult:
        start = perf_counter()
        try:
            addresses = await self._resolve(target, timeout_seconds)
            payload = b"A" * max(0, packet_size)
            for port in self._ports:
                connected = await self._connect_any(
                    target, addresses, port, timeout_seconds, payload
                )
                if not connected:
                    continue
                latency_ms = int((perf_counter() - start) * 1000)
                self._logger.debug(
                    "socket probe succeeded",
                    extra={
                        "event": "socket_ok",
                        "target": target,
                        "port": port,
                        "latency_ms": latency_ms,
                    },
                )
                return ProbeResult.succeeded(target, latency_ms)
        except Exception as exc:
            kind = classify(exc)
            self._logger.warning(
                "socket probe failed: %s",
                describe_fault(exc),
                extra={"event": "socket_failed", "target": target, "error_kind": kind.value},
            )
            return ProbeResult.failed(target, describe_fault(exc), kind)

        ports = ", ".join(str(port) for port in self._ports)
        self._logger.warning(
            "socket probe exhausted all ports",
            extra={
                "event": "socket_failed",
                "target": target,
                "error_kind": ErrorKind.NETWORK_UNREACHABLE.value,
            },
        )
        return ProbeResult.failed(
            target,
            f"all ports failed ({ports})",
            ErrorKind.NETWORK_UNREACHABLE,
        )

    async def _connect_any(
        self,
        target: str,
        addresses: list[str],
        port: int,
        timeout_seconds: float,
        payload: bytes,
    ) -> bool:
        for address in addresses:
            self._logger.debug(
                "socket probe connecting to %s",
                address,
                extra={"event": "socket_connect", "target": target, "port": port},
            )
            try:
                await tcp_connect(
                    address,
                    port,
                    timeout_seconds=timeout_seconds,
                    payload=payload,
                    logger=self._logger,
                )
            except Exception as exc:
                self._logger.warning(
                    "socket probe connect to %s failed: %s",
                    address,
                    describe_fault(exc),
                    extra={"event": "socket_port_failed", "target": target, "port": port},
                )
                continue
            return True
        return False

    async def _resolve(self, target: str, timeout_seconds: float) -> list[str]:
        try:
            ipaddress.ip_address(target)
            return [target]
        except ValueError:
            pass
        loop = asyncio.get_running_loop()
        infos = await asyncio.wait_for(
            loop.getaddrinfo(target, None, type=socket.SOCK_STREAM),
            timeout=timeout_seconds,
        )
        if not infos:
            raise socket.gaierror(f"no address found for host {target}")
        addresses: list[str] = []
        for info in infos:
            address = str(info[4][0])
            if address not in addresses:
                addresses.append(address)
        return addresses


class HttpProbeStrategy:
    name = "http"

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    async def probe(self, target: str, timeout_seconds: float, packet_size: int) -> ProbeResult:
        url = ensure_http_url(target)
        padding = "x" * max(0, min(packet_size, HTTP_PADDING_LIMIT) - HTTP_BASE_HEADER_BYTES)
        start = perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=timeout_seconds,
                follow_redirects=False,
            ) as client:
                async with client.stream(
                    "GET", url, headers={PING_SIZE_HEADER: padding}
                ) as response:
                    # Any status code counts as reachable.
                    async for _ in response.aiter_bytes():
                        pass
                    status_code = int(response.status_code)
        except Exception as exc:
            kind = classify(exc)
            self._logger.warning(
                "http probe failed: %s",
                describe_fault(exc),
                extra={"event": "http_failed", "target": target, "error_kind": kind.value},
            )
            return ProbeResult.failed(target, describe_fault(exc), kind)

        latency_ms = int((perf_counter() - start) * 1000)
        self._logger.debug(
            "http probe received HTTP %s",
            status_code,
            extra={"event": "http_ok", "target": target, "latency_ms": latency_ms},
        )
        return ProbeResult.succeeded(target, latency_ms)


def select_strategy(name: str = "auto", logger: logging.Logger | None = None) -> ProbeStrategy:
    normalized = (name or "auto").strip().lower()
    if normalized not in STRATEGY_NAMES:
        raise ValueError(f"Unknown probe strategy: {name!r}.")
    if normalized == "auto":
        normalized = "socket" if sockets_available() else "http"
    if normalized == "socket":
        return SocketProbeStrategy(logger=logger)
    return HttpProbeStrategy(logger=logger)
