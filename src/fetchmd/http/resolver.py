"""Connection-time resolver that only returns addresses approved by validation."""

from __future__ import annotations

import ipaddress
import logging
import socket
from typing import Any

from aiohttp.abc import AbstractResolver
from yarl import URL

logger = logging.getLogger(__name__)


class PinnedResolver(AbstractResolver):
    """
    aiohttp resolver backed by a table of validated hostname -> address pins.

    The transport connects to the exact address the validator approved
    instead of resolving the name a second time, so a DNS answer that
    changes between validation and connect is never used. Hostnames with
    no pin fail to resolve.

    Example:
        resolver = PinnedResolver()
        resolver.pin("example.com", "93.184.216.34")
        connector = aiohttp.TCPConnector(resolver=resolver)
    """

    def __init__(self) -> None:
        self._pins: dict[str, str] = {}

    @staticmethod
    def _key(hostname: str) -> str:
        """
        Normalize a hostname to the ASCII form aiohttp resolves.

        Internationalized names arrive from the validator in Unicode but the
        connector asks for their IDNA (punycode) encoding.
        """
        try:
            host = URL.build(scheme="https", host=hostname).raw_host
        except (ValueError, UnicodeError):
            host = None
        return (host or hostname).lower()

    def pin(self, hostname: str, address: str) -> None:
        """Record the approved address for a hostname."""
        self._pins[self._key(hostname)] = address

    def pinned(self, hostname: str) -> str | None:
        return self._pins.get(self._key(hostname))

    async def resolve(
        self,
        host: str,
        port: int = 0,
        family: socket.AddressFamily = socket.AF_INET,
    ) -> list[Any]:
        address = self.pinned(host)
        if address is None:
            raise OSError(f"No validated address for host {host}")

        ip = ipaddress.ip_address(address)
        resolved_family = socket.AF_INET6 if ip.version == 6 else socket.AF_INET
        logger.debug(f"Connecting {host} via pinned address {address}")
        return [
            {
                "hostname": host,
                "host": address,
                "port": port,
                "family": resolved_family,
                "proto": 0,
                "flags": socket.AI_NUMERICHOST,
            }
        ]

    async def close(self) -> None:
        self._pins.clear()
