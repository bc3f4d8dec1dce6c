"""Public address lookup for access hints.

After the server starts, the controller tries to discover the machine's
public IPv4 and IPv6 addresses so it can print a reachable URL. Lookups
are best effort: any network failure yields None and the hint is omitted.
"""

from __future__ import annotations

__all__ = [
    "PublicAddresses",
    "access_urls",
    "lookup_public_addresses",
    "lookup_public_ip",
]

import ipaddress
from typing import Literal, NamedTuple

import httpx

from labctl.constants import PUBLIC_IP_TIMEOUT_SECONDS, PUBLIC_IP_URL

# Binding the local side of the socket forces the address family
_LOCAL_ADDRESS = {4: "0.0.0.0", 6: "::"}


class PublicAddresses(NamedTuple):
    """Public addresses discovered for this host."""

    ipv4: str | None
    ipv6: str | None


def lookup_public_ip(
    family: Literal[4, 6],
    *,
    url: str = PUBLIC_IP_URL,
    timeout: float = PUBLIC_IP_TIMEOUT_SECONDS,
    transport: httpx.BaseTransport | None = None,
) -> str | None:
    """Ask an echo service for this host's public address.

    Args:
        family: 4 or 6.
        url: Service returning the caller's address as plain text.
        timeout: Request timeout in seconds.
        transport: Override transport (tests use httpx.MockTransport).

    Returns:
        The address string, or None if the lookup failed or returned garbage.
    """
    if transport is None:
        transport = httpx.HTTPTransport(local_address=_LOCAL_ADDRESS[family])

    try:
        with httpx.Client(transport=transport, timeout=timeout) as client:
            response = client.get(url)
            response.raise_for_status()
    except (httpx.HTTPError, OSError):
        return None

    text = response.text.strip()
    try:
        address = ipaddress.ip_address(text)
    except ValueError:
        return None
    if address.version != family:
        return None
    return str(address)


def lookup_public_addresses(
    *,
    url: str = PUBLIC_IP_URL,
    timeout: float = PUBLIC_IP_TIMEOUT_SECONDS,
) -> PublicAddresses:
    """Look up both public addresses (each independently best effort)."""
    return PublicAddresses(
        ipv4=lookup_public_ip(4, url=url, timeout=timeout),
        ipv6=lookup_public_ip(6, url=url, timeout=timeout),
    )


def access_urls(addresses: PublicAddresses, port: int, *, tls: bool) -> list[tuple[str, str]]:
    """Build (label, url) access hints for the discovered addresses.

    IPv6 is only listed when it differs from the IPv4 answer.
    """
    scheme = "https" if tls else "http"
    hints: list[tuple[str, str]] = []
    if addresses.ipv4:
        hints.append((f"Public IPv4: {addresses.ipv4}", f"{scheme}://{addresses.ipv4}:{port}"))
    if addresses.ipv6 and addresses.ipv6 != addresses.ipv4:
        hints.append((f"Public IPv6: {addresses.ipv6}", f"{scheme}://[{addresses.ipv6}]:{port}"))
    return hints
