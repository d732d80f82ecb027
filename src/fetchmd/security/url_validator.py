"""URL validation for SSRF prevention."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import socket
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

# Resolves a hostname to a single IP address string
Resolver = Callable[[str], Awaitable[str]]

BLOCKED_IPV4_NETWORKS = tuple(
    ipaddress.IPv4Network(net)
    for net in (
        "0.0.0.0/8",
        "10.0.0.0/8",
        "127.0.0.0/8",
        "169.254.0.0/16",
        "172.16.0.0/12",
        "192.168.0.0/16",
    )
)

BLOCKED_IPV6_NETWORKS = tuple(
    ipaddress.IPv6Network(net)
    for net in (
        "::1/128",
        "fc00::/7",
        "fe80::/10",
    )
)


class SecurityError(Exception):
    """Raised when a URL or its resolved address violates the contact policy."""


@dataclass(frozen=True)
class ValidatedUrl:
    """
    A URL that passed the safety policy, approved for one connection attempt.

    Attributes:
        href: Full URL string
        scheme: Always "https"
        hostname: Lowercased hostname (IPv6 literals without brackets)
        port: Explicit port, or the scheme default
        path: Path plus query string
        address: Address the hostname resolved to at validation time,
            None when the hostname is an IP literal
    """

    href: str
    scheme: str
    hostname: str
    port: int
    path: str
    address: str | None = None

    @property
    def is_ip_literal(self) -> bool:
        return self.address is None

    def __str__(self) -> str:
        return self.href


def is_private_address(address: str) -> bool:
    """
    Check an IP address against the blocked range table.

    Args:
        address: IPv4 or IPv6 address string

    Returns:
        True if the address is private/loopback/link-local

    Raises:
        ValueError: If address is not an IP address
    """
    ip = ipaddress.ip_address(address.split("%", 1)[0])

    if isinstance(ip, ipaddress.IPv6Address):
        if ip.ipv4_mapped is not None:
            ip = ip.ipv4_mapped
        else:
            return any(ip in net for net in BLOCKED_IPV6_NETWORKS)

    return any(ip in net for net in BLOCKED_IPV4_NETWORKS)


def _is_ip_literal(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return True


async def system_resolver(hostname: str) -> str:
    """Resolve a hostname with the event loop's getaddrinfo, first result wins."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    if not infos:
        raise OSError(f"No addresses found for {hostname}")
    address: str = infos[0][4][0]
    return address.split("%", 1)[0]


class UrlValidator:
    """
    Validates URLs before any network contact.

    Prevents SSRF (Server-Side Request Forgery) attacks by blocking:
    - Any scheme other than HTTPS
    - Localhost hostnames
    - Private, loopback and link-local IP literals
    - Hostnames that resolve to such addresses

    The resolver is injected so tests can substitute deterministic
    resolution. Every call resolves again; nothing is cached.

    Example:
        validator = UrlValidator()
        url = await validator.validate("https://example.com/page")
    """

    ALLOWED_SCHEMES = frozenset({"https"})
    BLOCKED_HOSTNAMES = frozenset({"localhost", "localhost.localdomain"})
    BLOCKED_SUFFIXES = (".localhost",)
    DEFAULT_PORTS = {"https": 443}

    def __init__(self, resolver: Resolver | None = None) -> None:
        """
        Initialize the URL validator.

        Args:
            resolver: Async hostname -> address function (default: system DNS)
        """
        self._resolver = resolver or system_resolver

    def _parse(self, candidate: str) -> tuple[str, str, int, str]:
        """Split a candidate into (scheme, hostname, port, path)."""
        try:
            parsed = urlsplit(candidate.strip())
            scheme = parsed.scheme.lower()
            hostname = parsed.hostname or ""
            port = parsed.port
        except (ValueError, AttributeError) as err:
            raise SecurityError(f"Invalid URL: {candidate}") from err

        if not scheme:
            raise SecurityError(f"Invalid URL: {candidate}")

        if scheme not in self.ALLOWED_SCHEMES:
            raise SecurityError(f'Scheme "{scheme}" is not allowed. Only HTTPS is supported.')

        if not hostname:
            raise SecurityError(f"Invalid URL: {candidate}")

        path = parsed.path or "/"
        if parsed.query:
            path = f"{path}?{parsed.query}"

        return scheme, hostname, port or self.DEFAULT_PORTS[scheme], path

    async def validate(self, candidate: str) -> ValidatedUrl:
        """
        Validate a candidate URL.

        Args:
            candidate: Untrusted URL string

        Returns:
            ValidatedUrl approved for one connection attempt

        Raises:
            SecurityError: If the URL violates the contact policy
        """
        scheme, hostname, port, path = self._parse(candidate)
        href = candidate.strip()

        bare = hostname.rstrip(".").lower()
        if bare in self.BLOCKED_HOSTNAMES or bare.endswith(self.BLOCKED_SUFFIXES):
            raise SecurityError(f'Hostname "{hostname}" is blocked.')

        if _is_ip_literal(hostname):
            if is_private_address(hostname):
                raise SecurityError(f'Access to private IP address "{hostname}" is blocked.')
            return ValidatedUrl(href=href, scheme=scheme, hostname=hostname, port=port, path=path)

        try:
            address = await self._resolver(hostname)
            private = is_private_address(address)
        except Exception as err:
            logger.debug(f"Resolution failed for {hostname}: {err}")
            raise SecurityError(f"Could not resolve hostname: {hostname}") from err

        if private:
            raise SecurityError(
                f'Hostname "{hostname}" resolved to private IP "{address}". Access blocked.'
            )

        logger.debug(f"Validated {href} ({hostname} -> {address})")
        return ValidatedUrl(
            href=href,
            scheme=scheme,
            hostname=hostname,
            port=port,
            path=path,
            address=address,
        )


async def validate_url(candidate: str, resolver: Resolver | None = None) -> ValidatedUrl:
    """Validate a candidate URL with a one-off UrlValidator."""
    return await UrlValidator(resolver=resolver).validate(candidate)
