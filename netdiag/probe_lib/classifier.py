from __future__ import annotations

import errno
import socket

import httpx

from netdiag.probe_lib.models import ErrorKind


# Winsock codes are not exposed by the errno module on POSIX builds.
_WSAEACCES = 10013
_WSAETIMEDOUT = 10060
_WSAENETDOWN = 10050
_WSAENETUNREACH = 10051
_WSAEHOSTDOWN = 10064
_WSAEHOSTUNREACH = 10065
_WSAHOST_NOT_FOUND = 11001
_WSATRY_AGAIN = 11002
_WSANO_DATA = 11004

_ERRNO_KINDS: dict[int, ErrorKind] = {
    errno.ETIMEDOUT: ErrorKind.TIMEOUT,
    _WSAETIMEDOUT: ErrorKind.TIMEOUT,
    _WSAHOST_NOT_FOUND: ErrorKind.HOST_NOT_FOUND,
    _WSATRY_AGAIN: ErrorKind.HOST_NOT_FOUND,
    _WSANO_DATA: ErrorKind.HOST_NOT_FOUND,
    errno.ENETUNREACH: ErrorKind.NETWORK_UNREACHABLE,
    errno.EHOSTUNREACH: ErrorKind.NETWORK_UNREACHABLE,
    errno.ENETDOWN: ErrorKind.NETWORK_UNREACHABLE,
    getattr(errno, "EHOSTDOWN", _WSAEHOSTDOWN): ErrorKind.NETWORK_UNREACHABLE,
    _WSAENETDOWN: ErrorKind.NETWORK_UNREACHABLE,
    _WSAENETUNREACH: ErrorKind.NETWORK_UNREACHABLE,
    _WSAEHOSTDOWN: ErrorKind.NETWORK_UNREACHABLE,
    _WSAEHOSTUNREACH: ErrorKind.NETWORK_UNREACHABLE,
    errno.EACCES: ErrorKind.PERMISSION_DENIED,
    errno.EPERM: ErrorKind.PERMISSION_DENIED,
    _WSAEACCES: ErrorKind.PERMISSION_DENIED,
}

_HOST_MARKERS = ("host", "dns", "getaddrinfo", "name or service not known")


def classify(fault: BaseException | str | None) -> ErrorKind:
    if fault is None:
        return ErrorKind.OTHER
    if isinstance(fault, str):
        return _classify_message(fault)
    for item in _fault_chain(fault):
        kind = _classify_structured(item)
        if kind is not None:
            return kind
    for item in _fault_chain(fault):
        kind = _classify_message(str(item))
        if kind is not ErrorKind.OTHER:
            return kind
    return ErrorKind.OTHER


def _fault_chain(fault: BaseException) -> list[BaseException]:
    chain: list[BaseException] = []
    current: BaseException | None = fault
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


def _classify_structured(fault: BaseException) -> ErrorKind | None:
    if isinstance(fault, (TimeoutError, httpx.TimeoutException)):
        return ErrorKind.TIMEOUT
    if isinstance(fault, socket.gaierror):
        return ErrorKind.HOST_NOT_FOUND
    if isinstance(fault, OSError):
        code = fault.errno
        if code is None:
            code = getattr(fault, "winerror", None)
        if code is None:
            return None
        return _ERRNO_KINDS.get(code, ErrorKind.OTHER)
    return None


def _classify_message(message: str) -> ErrorKind:
    lowered = (message or "").lower()
    if "timeout" in lowered or "timed out" in lowered:
        return ErrorKind.TIMEOUT
    if any(marker in lowered for marker in _HOST_MARKERS):
        return ErrorKind.HOST_NOT_FOUND
    if "permission" in lowered:
        return ErrorKind.PERMISSION_DENIED
    return ErrorKind.OTHER
