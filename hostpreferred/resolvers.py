"""
Built-in resolver configurations.

DNS-over-HTTPS endpoints serving the JSON API, in the priority order
they are tried for every domain.
"""

from .models import ResolverConfig


# Pre-configured resolver profiles
RESOLVERS: dict[str, ResolverConfig] = {
    "dnspod": ResolverConfig(
        name="DNSPod",
        doh_url="https://doh.pub/dns-query",
        description="Tencent DNSPod public DoH",
    ),
    "alidns": ResolverConfig(
        name="AliDNS",
        doh_url="https://dns.alidns.com/dns-query",
        description="Alibaba public DoH",
    ),
    "cloudflare": ResolverConfig(
        name="Cloudflare",
        doh_url="https://cloudflare-dns.com/dns-query",
        description="Cloudflare's privacy-focused DNS resolver",
    ),
    "google": ResolverConfig(
        name="Google",
        doh_url="https://dns.google/resolve",
        description="Google Public DNS JSON API",
    ),
}

# Fixed priority order used by the query engine
DEFAULT_RESOLVERS = ["dnspod", "alidns", "cloudflare", "google"]


def default_resolvers() -> list[ResolverConfig]:
    """Resolvers in priority order."""
    return [RESOLVERS[name] for name in DEFAULT_RESOLVERS]
