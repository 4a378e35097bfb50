"""Rate limiting for the diary API.

A moving window per client address. ``X-Forwarded-For`` is only honoured
when the direct peer is a trusted proxy, so clients cannot pick their own key.
"""

import ipaddress
from typing import Callable, Iterable

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from .config import Settings
from .logging_config import get_logger

logger = get_logger("rate_limit")

Network = ipaddress.IPv4Network | ipaddress.IPv6Network


def parse_trusted_cidrs(cidrs: Iterable[str]) -> list[Network]:
    """Parse CIDR strings, skipping (and logging) invalid ones."""
    networks = []
    for cidr in cidrs:
        try:
            networks.append(ipaddress.ip_network(cidr.strip(), strict=False))
        except ValueError:
            logger.warning(f"Ignoring invalid trusted proxy CIDR: {cidr!r}")
    return networks


def is_trusted_proxy(ip_str: str, networks: Iterable[Network]) -> bool:
    """Check if an IP is in the trusted proxy list."""
    try:
        addr = ipaddress.ip_address(ip_str)
    except ValueError:
        return False
    return any(addr in network for network in networks)


def make_client_ip_resolver(networks: list[Network]) -> Callable[[Request], str]:
    """Build the limiter key function for a fixed set of trusted proxies."""

    def get_client_ip(request: Request) -> str:
        direct_ip = get_remote_address(request)
        if is_trusted_proxy(direct_ip, networks):
            forwarded_for = request.headers.get("x-forwarded-for")
            if forwarded_for:
                client_ip = forwarded_for.split(",")[0].strip()
                if client_ip:
                    return client_ip
        return direct_ip

    return get_client_ip


def create_limiter(settings: Settings) -> Limiter:
    """Limiter applying ``settings.rate_limit`` to every request when enabled."""
    networks = parse_trusted_cidrs(settings.trusted_proxy_cidrs)
    limiter = Limiter(
        key_func=make_client_ip_resolver(networks),
        default_limits=[settings.rate_limit],
        strategy="moving-window",
        enabled=settings.rate_limit_enabled,
    )
    if settings.rate_limit_enabled:
        logger.info(f"Rate limiting enabled: {settings.rate_limit}")
    return limiter
