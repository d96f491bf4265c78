"""
Multi-resolver name resolution.

Resolves every domain independently and concurrently. Within one domain,
resolvers are tried in priority order and the first non-empty answer wins.
"""

import asyncio
import logging
from typing import Iterable, Optional

import httpx

from .models import ResolutionResult, ResolverConfig
from .resolvers import default_resolvers
from .transports import DoHResponseError, DoHTransport

logger = logging.getLogger(__name__)


class DoHQueryEngine:
    """
    DNS-over-HTTPS query engine with ordered resolver fallback.

    Every attempt is time-boxed; a timeout, HTTP error, unparsable body or
    empty answer moves on to the next resolver. A domain no resolver could
    answer is reported as unresolved rather than raising.
    """

    def __init__(
        self,
        resolvers: Optional[list[ResolverConfig]] = None,
        timeout: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the query engine.

        Args:
            resolvers: Resolvers in priority order (default: built-in list)
            timeout: Per-attempt timeout in seconds
            transport: Optional httpx transport (used to stub the network)
        """
        self.resolvers = resolvers if resolvers is not None else default_resolvers()
        self.timeout = timeout
        self._doh = DoHTransport(timeout=timeout, transport=transport)

    async def _attempt(self, resolver: ResolverConfig, domain: str) -> list[str]:
        """Single time-boxed attempt; returns [] on any resolver failure."""
        try:
            addresses, elapsed_ms = await asyncio.wait_for(
                self._doh.query(resolver, domain),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.debug("DoH timeout for %s via %s", domain, resolver.name)
            return []
        except httpx.HTTPError as e:
            logger.debug("DoH failed for %s via %s: %s", domain, resolver.name, e)
            return []
        except DoHResponseError as e:
            logger.debug("DoH bad answer for %s via %s: %s", domain, resolver.name, e)
            return []

        logger.debug(
            "DoH OK for %s via %s (%d addresses, %.1f ms)",
            domain, resolver.name, len(addresses), elapsed_ms,
        )
        return addresses

    async def resolve(self, domain: str) -> list[str]:
        """
        Resolve a domain, falling back through the resolvers in order.

        Returns:
            Addresses from the first resolver with a non-empty answer,
            or an empty list if all of them failed
        """
        for resolver in self.resolvers:
            addresses = await self._attempt(resolver, domain)
            if addresses:
                return addresses

        logger.warning("All DoH resolvers failed for %s", domain)
        return []

    async def resolve_all(self, domains: Iterable[str]) -> ResolutionResult:
        """
        Resolve many domains concurrently.

        An unexpected error inside one domain's task is logged and counts
        as that domain being unresolved; sibling domains are unaffected.

        Returns:
            Mapping of resolved domains to their addresses
        """
        domains = list(domains)
        results = await asyncio.gather(
            *(self.resolve(domain) for domain in domains),
            return_exceptions=True,
        )

        resolution: ResolutionResult = {}
        for domain, result in zip(domains, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.error("Resolution task for %s crashed: %r", domain, result)
                continue
            if result:
                resolution[domain] = result

        return resolution

    async def close(self):
        """Close transport connections."""
        await self._doh.close()
