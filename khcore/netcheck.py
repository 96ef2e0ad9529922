"""Network connection check: dials a target and reports whether it is reachable."""

from __future__ import annotations

import logging
import queue
import socket
import threading
from dataclasses import dataclass

log = logging.getLogger(__name__)

DEFAULT_DIAL_TIMEOUT = 20.0

TIMEOUT_MESSAGE = "Failed to complete network connection check in time! Timeout was reached."

_STREAM_NETWORKS = {"tcp": socket.AF_UNSPEC, "tcp4": socket.AF_INET, "tcp6": socket.AF_INET6}
_DATAGRAM_NETWORKS = {"udp": socket.AF_UNSPEC, "udp4": socket.AF_INET, "udp6": socket.AF_INET6}


def split_address(full_address: str) -> tuple[str, str]:
    """Split "proto://host:port" into protocol and address; the protocol defaults to tcp."""
    network, sep, address = full_address.partition("://")
    if sep:
        return network, address
    return "tcp", full_address


def _split_host_port(address: str) -> tuple[str, str]:
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise ValueError(f"address {address}: missing ']' in address")
        host = address[1:end]
        rest = address[end + 1 :]
        if not rest.startswith(":"):
            raise ValueError(f"address {address}: missing port in address")
        return host, rest[1:]
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"address {address}: missing port in address")
    if ":" in host:
        raise ValueError(f"address {address}: too many colons in address")
    return host, port


def _dial(network: str, address: str, timeout: float) -> None:
    if network in _STREAM_NETWORKS:
        family, kind = _STREAM_NETWORKS[network], socket.SOCK_STREAM
    elif network in _DATAGRAM_NETWORKS:
        family, kind = _DATAGRAM_NETWORKS[network], socket.SOCK_DGRAM
    else:
        raise OSError(f"dial {network}: unknown network {network}")

    host, port = _split_host_port(address)
    try:
        candidates = socket.getaddrinfo(host or None, port, family, kind)
    except socket.gaierror as exc:
        raise OSError(f"dial {network} {address}: {exc}") from exc

    last_error: OSError | None = None
    for af, socktype, proto, _, sockaddr in candidates:
        sock = socket.socket(af, socktype, proto)
        try:
            sock.settimeout(timeout)
            sock.connect(sockaddr)
            return
        except OSError as exc:
            last_error = exc
        finally:
            sock.close()
    raise OSError(f"dial {network} {address}: {last_error}")


@dataclass
class NetworkConnectionChecker:
    """Checks that a connection target can (or, if expected, cannot) be reached."""

    connection_target: str
    target_unreachable: bool = False
    dial_timeout: float = DEFAULT_DIAL_TIMEOUT

    def do_check(self) -> None:
        """Dial the target once; raise ConnectionError if it is down."""
        network, address = split_address(self.connection_target)
        try:
            _dial(network, address, self.dial_timeout)
        except (OSError, ValueError) as exc:
            message = (
                f"Network connection check determined that {self.connection_target} "
                f"is DOWN: {exc}"
            )
            log.error(message)
            raise ConnectionError(message) from exc

    def run(self, timeout: float) -> list[str]:
        """Run the check within ``timeout`` seconds and return the failures to report.

        An empty list means success. A failed dial counts as success when the
        target is expected to be unreachable.
        """
        log.info("Running network connection checker")
        results: queue.Queue[BaseException | None] = queue.Queue(maxsize=1)

        def work() -> None:
            try:
                self.do_check()
            except Exception as exc:
                results.put(exc)
            else:
                results.put(None)

        threading.Thread(target=work, daemon=True).start()
        try:
            error = results.get(timeout=max(timeout, 0.0))
        except queue.Empty:
            log.info("Cancelling check and shutting down due to timeout.")
            return [TIMEOUT_MESSAGE]
        if error is not None and not self.target_unreachable:
            return [str(error)]
        return []