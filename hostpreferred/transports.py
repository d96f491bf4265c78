"""
DNS-over-HTTPS transport.

Sends JSON-API DoH queries (``application/dns-json``) and extracts
the A record addresses from the ``Answer`` section.
"""

import socket
import time
from typing import Optional

import dns.inet
import dns.rdatatype
import httpx

from .models import ResolverConfig


class DoHResponseError(Exception):
    """The resolver answered, but not with a usable address list."""


def extract_addresses(payload: object) -> list[str]:
    """
    Pull IPv4 addresses out of a DoH JSON payload.

    Answer records whose ``data`` is not an IPv4 address (CNAME targets,
    for instance) are skipped. Duplicates are dropped, answer order kept.

    Raises:
        DoHResponseError: if the payload has no usable Answer section
    """
    if not isinstance(payload, dict):
        raise DoHResponseError("response is not a JSON object")

    answers = payload.get("Answer")
    if not answers:
        raise DoHResponseError("empty or absent Answer section")
    if not isinstance(answers, list):
        raise DoHResponseError("Answer section is not a list")

    addresses: list[str] = []
    for record in answers:
        if not isinstance(record, dict):
            continue
        data = record.get("data")
        if not isinstance(data, str):
            continue
        data = data.strip()
        try:
            family = dns.inet.af_for_address(data)
        except ValueError:
            continue
        if family == socket.AF_INET and data not in addresses:
            addresses.append(data)

    if not addresses:
        raise DoHResponseError("Answer section holds no IPv4 address")
    return addresses


class DoHTransport:
    """DNS over HTTPS (JSON API)."""

    def __init__(
        self,
        timeout: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize DoH transport.

        Args:
            timeout: HTTP timeout in seconds
            transport: Optional httpx transport (used to stub the network)
        """
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP/2 client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                http2=True,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def query(
        self,
        resolver: ResolverConfig,
        domain: str,
    ) -> tuple[list[str], float]:
        """
        Resolve the A records of a domain through one resolver.

        Returns:
            Tuple of (addresses, elapsed_ms)

        Raises:
            httpx.HTTPError: on transport failure or non-2xx status
            DoHResponseError: if the body is not JSON or holds no address
        """
        client = await self._get_client()

        start = time.perf_counter_ns()

        response = await client.get(
            resolver.doh_url,
            params={
                "name": domain,
                "type": dns.rdatatype.to_text(dns.rdatatype.A),
            },
            headers={"accept": "application/dns-json"},
        )
        response.raise_for_status()

        try:
            payload = response.json()
        except ValueError as e:
            raise DoHResponseError(f"unparsable response body: {e}") from e

        end = time.perf_counter_ns()

        return extract_addresses(payload), (end - start) / 1_000_000

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
