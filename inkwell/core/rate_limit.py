"""
Rate limiting for Inkwell.

Provides the shared slowapi limiter and a key function that handles
X-Forwarded-For headers by only trusting them from known proxy IPs.
"""
import ipaddress
import os

from fastapi import Request
from slowapi import Limiter


def parse_trusted_proxies() -> set[str]:
    """
    Parse trusted proxy IPs from environment variable.

    INKWELL_TRUSTED_PROXIES holds a comma-separated list of IP addresses
    (or CIDR ranges) trusted to send legitimate X-Forwarded-For headers.

    Example: INKWELL_TRUSTED_PROXIES="10.0.0.1,10.0.0.2,172.16.0.0/28"

    Returns:
        Set of trusted IP addresses (expanded if CIDR ranges provided).
    """
    proxy_config = os.getenv("INKWELL_TRUSTED_PROXIES", "")

    trusted = set()
    for proxy in proxy_config.split(","):
        proxy = proxy.strip()
        if not proxy:
            continue

        if "/" in proxy:
            try:
                network = ipaddress.ip_network(proxy, strict=False)
            except ValueError:
                continue
            trusted.update(str(ip) for ip in network.hosts())
        else:
            trusted.add(proxy)

    return trusted


_TRUSTED_PROXIES: set[str] | None = None


def get_trusted_proxies() -> set[str]:
    """Get cached trusted proxies, parsing on first access."""
    global _TRUSTED_PROXIES
    if _TRUSTED_PROXIES is None:
        _TRUSTED_PROXIES = parse_trusted_proxies()
    return _TRUSTED_PROXIES


def get_real_client_ip(request: Request) -> str:
    """
    Get the real client IP address for rate limiting and audit logs.

    X-Forwarded-For is only honoured when the direct client is a trusted
    proxy; then the rightmost non-trusted address in the chain is used.

    Args:
        request: The FastAPI request object.

    Returns:
        The client IP address.
    """
    direct_client_ip = request.client.host if request.client else "unknown"

    trusted_proxies = get_trusted_proxies()
    if not trusted_proxies or direct_client_ip not in trusted_proxies:
        return direct_client_ip

    x_forwarded_for = request.headers.get("X-Forwarded-For")
    if not x_forwarded_for:
        return direct_client_ip

    # X-Forwarded-For format: client, proxy1, proxy2, ...
    ips = [ip.strip() for ip in x_forwarded_for.split(",")]

    for ip in reversed(ips):
        if ip and ip not in trusted_proxies:
            return ip

    # All IPs in chain are trusted proxies, use the leftmost (original source)
    return ips[0] if ips else direct_client_ip


limiter = Limiter(
    key_func=get_real_client_ip,
    enabled=os.getenv("INKWELL_RATE_LIMIT_ENABLED", "true").lower() == "true",
)
