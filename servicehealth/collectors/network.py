"""
servicehealth.collectors.network
AUTHOR: carter-vin

Network collectors
- HTTP probe (httpx, bounded timeout, status < 400 counts as success)
- DNS resolution
- TCP port listening state (/proc/net/tcp{,6}, TCP connect as fallback)

Every probe returns a plain bool / result; reachability is never a string.
"""

from __future__ import annotations

import socket
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

import httpx

PROC_NET_TCP = (Path("/proc/net/tcp"), Path("/proc/net/tcp6"))

# /proc/net/tcp state column
TCP_LISTEN = "0A"


@dataclass(frozen=True)
class HttpProbeResult:
    url: str
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


def probe_http(url: str, timeout_s: float) -> HttpProbeResult:
    """
    Single GET with a bounded timeout

    Mirrors `curl -f`: 4xx/5xx are failures.
    """
    try:
        response = httpx.get(url, timeout=timeout_s, follow_redirects=True)
    except httpx.HTTPError as e:
        return HttpProbeResult(url=url, ok=False, error=f"{type(e).__name__}: {e}")

    return HttpProbeResult(
        url=url,
        ok=response.status_code < 400,
        status_code=response.status_code,
        error=None if response.status_code < 400 else f"HTTP {response.status_code}",
    )


def http_ok(url: str, timeout_s: float) -> bool:
    return probe_http(url, timeout_s).ok


def _getaddrinfo(hostname: str) -> list[str]:
    try:
        infos = socket.getaddrinfo(hostname, None)
    except (socket.gaierror, UnicodeError):
        return []
    return sorted({info[4][0] for info in infos})


def resolve_dns(
    hostname: str,
    timeout_s: float = 5.0,
    *,
    resolver: Callable[[str], list[str]] = _getaddrinfo,
) -> list[str]:
    """
    Resolve hostname -> sorted unique addresses (empty on failure or timeout)

    getaddrinfo has no timeout argument, so the lookup runs on a daemon
    thread and the caller stops waiting after timeout_s.
    """
    answer: list[list[str]] = []

    def lookup() -> None:
        answer.append(resolver(hostname))

    worker = threading.Thread(target=lookup, name=f"dns-{hostname}", daemon=True)
    worker.start()
    worker.join(timeout_s)
    if worker.is_alive() or not answer:
        return []
    return answer[0]


def _listening_ports_from_proc(contents: str) -> set[int]:
    """
    Parse a /proc/net/tcp table into the set of LISTEN ports
    """
    ports: set[int] = set()
    for line in contents.splitlines()[1:]:
        parts = line.split()
        if len(parts) < 4:
            continue
        local, state = parts[1], parts[3]
        if state != TCP_LISTEN or ":" not in local:
            continue
        try:
            ports.add(int(local.rsplit(":", 1)[1], 16))
        except ValueError:
            continue
    return ports


def listening_ports(tables: Iterable[Path] = PROC_NET_TCP) -> set[int] | None:
    """
    All TCP ports in LISTEN state; None when no table could be read
    """
    ports: set[int] = set()
    read_any = False
    for table in tables:
        try:
            contents = table.read_text(encoding="utf-8")
        except OSError:
            continue
        read_any = True
        ports |= _listening_ports_from_proc(contents)
    return ports if read_any else None


def _tcp_connect(port: int, *, host: str = "127.0.0.1", timeout_s: float = 2.0) -> bool:
    try:
        with socket.create_connection((host, port), timeout=timeout_s):
            return True
    except OSError:
        return False


def port_listening(port: int, *, tables: Iterable[Path] = PROC_NET_TCP) -> bool:
    """
    Is something listening on `port`?

    Strategy order: /proc LISTEN table, then a local TCP connect.
    """
    ports = listening_ports(tables)
    if ports is not None:
        return port in ports
    return _tcp_connect(port)
