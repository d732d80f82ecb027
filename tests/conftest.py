"""Shared fixtures for fetchmd tests."""

import pytest
from aioresponses import aioresponses

PUBLIC_ADDRESS = "93.184.216.34"


@pytest.fixture
def public_address():
    return PUBLIC_ADDRESS


@pytest.fixture
def make_resolver():
    """Factory for deterministic resolvers; unknown hostnames fail to resolve."""

    def factory(mapping: dict[str, str], calls: list[str] | None = None):
        async def resolve(hostname: str) -> str:
            if calls is not None:
                calls.append(hostname)
            if hostname not in mapping:
                raise OSError(f"ENOTFOUND {hostname}")
            return mapping[hostname]

        return resolve

    return factory


@pytest.fixture
def public_dns():
    """Resolver that maps every hostname to a public address."""

    async def resolve(hostname: str) -> str:
        return PUBLIC_ADDRESS

    return resolve


@pytest.fixture
def mock_http():
    """Mock aiohttp at the session layer."""
    with aioresponses() as m:
        yield m
