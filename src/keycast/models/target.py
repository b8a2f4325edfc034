"""Output target model and address parsing."""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import TargetProtocol

logger = logging.getLogger(__name__)

_CSV_ALIASES = ("csv", "stdout")


class Target(BaseModel):
    """
    A protocol plus address destination for broadcast output.

    The address keeps everything after the scheme, e.g. ``localhost:8000/mixer``
    for ``osc://localhost:8000/mixer`` or ``IAC Bus 1`` for ``midi://IAC Bus 1``.
    """

    model_config = ConfigDict(frozen=True)

    protocol: TargetProtocol = Field(description="Wire protocol")
    address: str = Field(default="", description="Address without the scheme")

    @property
    def host(self) -> Optional[str]:
        """Host part of a network address, if any."""
        hostport = self.address.split("/", 1)[0]
        if ":" not in hostport:
            return hostport or None
        return hostport.rsplit(":", 1)[0] or None

    @property
    def port(self) -> Optional[int]:
        """Port part of a network address, if any."""
        hostport = self.address.split("/", 1)[0]
        if ":" not in hostport:
            return None
        try:
            return int(hostport.rsplit(":", 1)[1])
        except ValueError:
            return None

    @property
    def path(self) -> str:
        """OSC address prefix, always starting with '/' and never ending with one."""
        if "/" not in self.address:
            return ""
        return "/" + self.address.split("/", 1)[1].strip("/")

    def __str__(self) -> str:
        if self.protocol == TargetProtocol.CSV:
            return "csv"
        return f"{self.protocol.value}://{self.address}"


def parse_target(address: str) -> Target:
    """
    Parse a target address string.

    Examples:
        >>> parse_target("csv").protocol
        <TargetProtocol.CSV: 'csv'>
        >>> parse_target("osc://localhost:8000").port
        8000
        >>> parse_target("midi://IAC Bus 1").address
        'IAC Bus 1'

    Unrecognized forms parse to an UNKNOWN target; messages sent to it are dropped.
    """
    text = address.strip()
    lowered = text.lower()

    if lowered in _CSV_ALIASES:
        return Target(protocol=TargetProtocol.CSV, address="")

    if "://" in text:
        scheme, rest = text.split("://", 1)
    elif lowered.startswith("midi:"):
        scheme, rest = text.split(":", 1)
    else:
        logger.debug(f"Unrecognized target address: {address!r}")
        return Target(protocol=TargetProtocol.UNKNOWN, address=text)

    scheme = scheme.lower()
    if scheme in _CSV_ALIASES:
        return Target(protocol=TargetProtocol.CSV, address=rest)
    if scheme == "osc":
        return Target(protocol=TargetProtocol.OSC, address=rest)
    if scheme == "udp":
        return Target(protocol=TargetProtocol.UDP, address=rest)
    if scheme == "midi":
        return Target(protocol=TargetProtocol.MIDI, address=rest.strip())

    logger.debug(f"Unrecognized target scheme {scheme!r} in {address!r}")
    return Target(protocol=TargetProtocol.UNKNOWN, address=text)


def parse_targets(addresses: list[str] | str | None) -> list[Target]:
    """Parse a scalar or list of addresses, keeping their order."""
    if addresses is None:
        return []
    if isinstance(addresses, str):
        addresses = [addresses]
    return [parse_target(a) for a in addresses]
