"""Wire-level send per target protocol."""

import logging
import socket
import threading
from collections.abc import Callable, Sequence
from typing import Any

import click
import numpy as np
from pythonosc.udp_client import SimpleUDPClient

from keycast.models import Target, TargetProtocol

logger = logging.getLogger(__name__)


def format_value(value: Any) -> str:
    """
    Render a typed value as text for CSV and UDP framing.

    Floats use up to six significant digits, vectors and colors are
    comma separated, booleans become on/off.
    """
    if isinstance(value, bool):
        return "on" if value else "off"
    if isinstance(value, (float, np.floating)):
        return f"{float(value):g}"
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if isinstance(value, (np.ndarray, Sequence)) and not isinstance(value, str):
        return ",".join(format_value(v) for v in value)
    return str(value)


def osc_arguments(value: Any) -> Any:
    """Convert a typed value to python-osc arguments."""
    if isinstance(value, bool):
        return "on" if value else "off"
    if isinstance(value, (np.floating, np.integer)):
        return value.item()
    if isinstance(value, (np.ndarray, Sequence)) and not isinstance(value, str):
        return [osc_arguments(v) for v in value]
    return value


class Broadcaster:
    """
    Sends ``(property, value)`` pairs to CSV, OSC and UDP targets.

    Sends are fire-and-forget: socket errors are logged and reported as
    failure, never raised. MIDI targets are not handled here, the router
    forwards MIDI kinds to output devices directly.
    """

    def __init__(self, echo: Callable[[str], None] = click.echo):
        """
        Args:
            echo: Line writer for CSV targets (stdout by default)
        """
        self._echo = echo
        self._osc_clients: dict[tuple[str, int], SimpleUDPClient] = {}
        self._udp_socket: socket.socket | None = None
        self._lock = threading.Lock()

    def broadcast(self, target: Target, prop: str, value: Any) -> bool:
        """
        Send one property/value pair to one target.

        Returns:
            True if sent (or dropped on an unknown target), False on failure
        """
        if target.protocol == TargetProtocol.UNKNOWN:
            logger.warning(f"Unknown protocol for {prop} {format_value(value)} ({target.address!r})")
            return True

        if target.protocol == TargetProtocol.CSV:
            self._echo(f"{prop},{format_value(value)}")
            return True

        if target.protocol == TargetProtocol.OSC:
            return self._send_osc(target, prop, value)

        if target.protocol == TargetProtocol.UDP:
            return self._send_udp(target, prop, value)

        logger.debug(f"Broadcaster does not send to {target}: {prop}")
        return False

    def _send_osc(self, target: Target, prop: str, value: Any) -> bool:
        if target.host is None or target.port is None:
            logger.error(f"OSC target needs host:port, got {target.address!r}")
            return False

        address = f"{target.path}/{prop.strip('/')}"
        try:
            client = self._osc_client(target.host, target.port)
            client.send_message(address, osc_arguments(value))
            return True
        except OSError as e:
            logger.error(f"Error sending OSC {address} to {target}: {e}")
            return False

    def _send_udp(self, target: Target, prop: str, value: Any) -> bool:
        if target.host is None or target.port is None:
            logger.error(f"UDP target needs host:port, got {target.address!r}")
            return False

        payload = f"{prop},{format_value(value)}".encode("utf-8")
        try:
            with self._lock:
                if self._udp_socket is None:
                    self._udp_socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
                self._udp_socket.sendto(payload, (target.host, target.port))
            return True
        except OSError as e:
            logger.error(f"Error sending UDP to {target}: {e}")
            return False

    def _osc_client(self, host: str, port: int) -> SimpleUDPClient:
        with self._lock:
            client = self._osc_clients.get((host, port))
            if client is None:
                client = SimpleUDPClient(host, port)
                self._osc_clients[(host, port)] = client
                logger.debug(f"Created OSC client for {host}:{port}")
            return client

    def close(self) -> None:
        """Release sockets."""
        with self._lock:
            if self._udp_socket is not None:
                self._udp_socket.close()
                self._udp_socket = None
            self._osc_clients.clear()
