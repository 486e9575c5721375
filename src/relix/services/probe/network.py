"""Deadline-bounded reachability check for repository hosts.

`socket.getaddrinfo` cannot be given a timeout, so resolution runs on a
daemon thread while the caller waits on a condition variable. When the
deadline passes first, the resolver thread is abandoned: it keeps running
until the system resolver returns and its result is thrown away. At most
one such thread leaks per timed-out probe.

The TCP check uses a non-blocking connect and waits for writability with
`select`, bounded by whatever is left of the same total budget.
"""

from __future__ import annotations

import errno
import select
import socket
import threading
import time
from dataclasses import dataclass
from typing import Any

from relix.logger import get_logger
from relix.services.i18n import translate

logger = get_logger(__name__)

HTTP_PORT = 80
HTTPS_PORT = 443
DEFAULT_TIMEOUT_MS = 3000

AddrInfo = tuple[Any, ...]


@dataclass
class Reachability:
    reachable: bool
    error: str = ""
    elapsed_ms: int = 0


def parse_host_port(uri: str) -> tuple[str, int]:
    """Derive the host and TCP port to probe from a repository URI.

    ``https`` URIs default to port 443, everything else to 80. An explicit
    ``host:port`` wins. IPv6 literals in brackets are supported.
    """
    port = HTTPS_PORT if uri.startswith("https") else HTTP_PORT
    scheme_end = uri.find("://")
    rest = uri[scheme_end + 3 :] if scheme_end >= 0 else uri
    hostport = rest.split("/", 1)[0]
    if "@" in hostport:
        hostport = hostport.rsplit("@", 1)[1]

    if hostport.startswith("["):
        host, _, tail = hostport[1:].partition("]")
        if tail.startswith(":") and tail[1:].isdigit():
            port = int(tail[1:])
        return host, port

    host, sep, port_text = hostport.rpartition(":")
    if sep and port_text.isdigit():
        return host, int(port_text)
    return hostport, port


class _Resolution:
    """Result slot shared between the waiting caller and the resolver thread."""

    def __init__(self) -> None:
        self.cond = threading.Condition()
        self.done = False
        self.result: list[AddrInfo] = []
        self.error: OSError | None = None


def resolve_with_deadline(host: str, port: int, timeout: float) -> list[AddrInfo]:
    """Resolve `host` for a TCP connection, giving up after `timeout` seconds.

    Raises:
        TimeoutError: If resolution has not finished by the deadline
        OSError: If resolution failed (``socket.gaierror``)
    """
    slot = _Resolution()

    def worker() -> None:
        try:
            result = socket.getaddrinfo(host, port, socket.AF_UNSPEC, socket.SOCK_STREAM)
            error = None
        except OSError as e:
            result, error = [], e
        with slot.cond:
            slot.result = result
            slot.error = error
            slot.done = True
            slot.cond.notify_all()

    threading.Thread(target=worker, name=f"resolve-{host}", daemon=True).start()

    with slot.cond:
        if not slot.cond.wait_for(lambda: slot.done, timeout=timeout):
            raise TimeoutError(f"resolving {host} timed out")
        if slot.error is not None:
            raise slot.error
        return slot.result


def connect_with_deadline(addr: AddrInfo, timeout: float) -> None:
    """Open a TCP connection to one resolved address within `timeout` seconds.

    The socket is always closed before returning.

    Raises:
        TimeoutError: If the socket did not become writable in time
        OSError: If the connection was refused or failed
    """
    family, socktype, proto, _canonname, sockaddr = addr
    sock = socket.socket(family, socktype, proto)
    try:
        sock.setblocking(False)
        err = sock.connect_ex(sockaddr)
        if err not in (0, errno.EINPROGRESS, errno.EWOULDBLOCK, errno.EAGAIN):
            raise OSError(err, errno.errorcode.get(err, str(err)))

        _, writable, _ = select.select([], [sock], [], max(timeout, 0.0))
        if not writable:
            raise TimeoutError("connect timed out")

        err = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if err != 0:
            raise OSError(err, errno.errorcode.get(err, str(err)))
    finally:
        sock.close()


def check_reachable(uri: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> Reachability:
    """Resolve and connect to the host behind `uri` within one total budget.

    Never raises for network conditions; failures come back as
    ``reachable=False`` with a message.
    """
    started = time.monotonic()
    deadline = started + timeout_ms / 1000.0

    def done(reachable: bool, error: str = "") -> Reachability:
        elapsed = int((time.monotonic() - started) * 1000)
        return Reachability(reachable=reachable, error=error, elapsed_ms=elapsed)

    host, port = parse_host_port(uri)
    if not host:
        return done(False, translate("probe.no_host", uri=uri))

    try:
        addrs = resolve_with_deadline(host, port, deadline - time.monotonic())
    except TimeoutError:
        logger.debug("Resolution timed out", host=host, timeout_ms=timeout_ms)
        return done(False, translate("probe.resolve_timeout", host=host))
    except OSError as e:
        return done(False, translate("probe.resolve_failed", host=host, error=e.strerror or str(e)))

    error = translate("probe.resolve_failed", host=host, error="no addresses")
    for addr in addrs:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            error = translate("probe.connect_timeout", host=host, port=port)
            break
        try:
            connect_with_deadline(addr, remaining)
        except TimeoutError:
            error = translate("probe.connect_timeout", host=host, port=port)
        except OSError as e:
            error = translate("probe.connect_failed", host=host, port=port, error=e.strerror or str(e))
        else:
            return done(True)

    return done(False, error)
