from __future__ import annotations

import asyncio
import errno
import socket

import httpx
import pytest

from netdiag.probe_lib.classifier import classify
from netdiag.probe_lib.models import ErrorKind


def _wrapped_connect_error() -> httpx.ConnectError:
    try:
        try:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        except socket.gaierror as exc:
            raise httpx.ConnectError("connection failed") from exc
    except httpx.ConnectError as wrapped:
        return wrapped


@pytest.mark.parametrize(
    ("fault", "expected"),
    [
        (TimeoutError(), ErrorKind.TIMEOUT),
        (asyncio.TimeoutError(), ErrorKind.TIMEOUT),
        (httpx.ConnectTimeout("timed out"), ErrorKind.TIMEOUT),
        (OSError(errno.ETIMEDOUT, "Connection timed out"), ErrorKind.TIMEOUT),
        (socket.gaierror(socket.EAI_NONAME, "Name or service not known"), ErrorKind.HOST_NOT_FOUND),
        (OSError(errno.ENETUNREACH, "Network is unreachable"), ErrorKind.NETWORK_UNREACHABLE),
        (OSError(errno.EHOSTUNREACH, "No route to host"), ErrorKind.NETWORK_UNREACHABLE),
        (OSError(errno.EACCES, "Permission denied"), ErrorKind.PERMISSION_DENIED),
        (OSError(11004, "getaddrinfo failed"), ErrorKind.HOST_NOT_FOUND),
        (OSError(10065, "No route to host"), ErrorKind.NETWORK_UNREACHABLE),
    ],
)
def test_classify_structured_codes(fault: BaseException, expected: ErrorKind) -> None:
    assert classify(fault) is expected


def test_classify_recognized_but_unmapped_code_is_other() -> None:
    # The message mentions a host, but the structured tier wins.
    fault = ConnectionRefusedError(errno.ECONNREFUSED, "Connection refused by host")
    assert classify(fault) is ErrorKind.OTHER


def test_classify_unwraps_httpx_connect_error_cause() -> None:
    assert classify(_wrapped_connect_error()) is ErrorKind.HOST_NOT_FOUND


@pytest.mark.parametrize(
    ("fault", "expected"),
    [
        (RuntimeError("Connection Timeout while reading"), ErrorKind.TIMEOUT),
        (RuntimeError("DNS lookup failed"), ErrorKind.HOST_NOT_FOUND),
        (RuntimeError("Failed host lookup: 'nowhere'"), ErrorKind.HOST_NOT_FOUND),
        (RuntimeError("Permission check failed"), ErrorKind.PERMISSION_DENIED),
        (ValueError("boom"), ErrorKind.OTHER),
        ("getaddrinfo failed", ErrorKind.HOST_NOT_FOUND),
        ("", ErrorKind.OTHER),
        (None, ErrorKind.OTHER),
    ],
)
def test_classify_message_fallback(fault, expected: ErrorKind) -> None:
    assert classify(fault) is expected


def test_classify_is_total_over_mixed_faults() -> None:
    faults = [
        KeyError("x"),
        OSError(),
        OSError(99999, "strange"),
        httpx.ReadError("reset"),
        "whatever",
        _wrapped_connect_error(),
    ]
    for fault in faults:
        assert classify(fault) in set(ErrorKind)
