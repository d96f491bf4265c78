"""
Latency prober.

Measures ICMP echo round-trip times for candidate addresses and picks the
fastest reachable address of a domain.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from functools import partial
from typing import Callable, Iterable, Optional

import ping3
import ping3.errors

from .models import BestCandidate, ProbeResult
from .statistics import StatisticsEngine

logger = logging.getLogger(__name__)


# ping3.ping compatible: returns delay, None on timeout, False on error
PingFunc = Callable[..., Optional[float]]


class LatencyProber:
    """
    ICMP latency prober.

    ping3 blocks, so every address being probed gets its own worker thread:
    a silent address never delays another one. A lost or failed probe only
    drops its own sample; an address with no replies at all is unreachable,
    which is a result and not an error.
    """

    def __init__(
        self,
        count: int = 3,
        timeout: float = 1.0,
        ping_func: Optional[PingFunc] = None,
    ):
        """
        Initialize the prober.

        Args:
            count: Echo requests per address
            timeout: Timeout per echo request in seconds
            ping_func: Replacement for ping3.ping (used by tests)
        """
        self.count = count
        self.timeout = timeout
        self._ping = ping_func or ping3.ping
        self._executors: set[ThreadPoolExecutor] = set()

    def _ping_once(self, ip: str, seq: int) -> Optional[float]:
        """Blocking single echo request; returns RTT in ms or None."""
        try:
            delay = self._ping(ip, timeout=self.timeout, unit="ms", seq=seq)
        except (ping3.errors.PingError, OSError) as e:
            logger.debug("Ping %s seq=%d failed: %s", ip, seq, e)
            return None

        # ping3 reports errors as False, timeouts as None
        if delay is None or delay is False:
            return None
        return float(delay)

    async def probe(
        self,
        ip: str,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> ProbeResult:
        """
        Send the configured number of probes to one address, sequentially.

        Args:
            ip: Address to probe
            executor: Thread pool to ping on; a one-thread pool is used if omitted

        Returns:
            ProbeResult with the replies received and their mean RTT
        """
        if executor is None:
            async with self._pool(1) as own:
                return await self.probe(ip, own)

        loop = asyncio.get_running_loop()
        rtts: list[float] = []

        for seq in range(self.count):
            rtt = await loop.run_in_executor(
                executor,
                partial(self._ping_once, ip, seq),
            )
            if rtt is not None:
                rtts.append(rtt)

        result = ProbeResult(
            ip=ip,
            sent=self.count,
            rtts_ms=rtts,
            mean_rtt_ms=StatisticsEngine.mean_rtt(rtts),
        )
        if result.is_reachable:
            logger.debug(
                "Probed %s: %.1f ms (%d/%d replies)",
                ip, result.mean_rtt_ms, result.received, result.sent,
            )
        else:
            logger.debug("Probed %s: unreachable", ip)
        return result

    @asynccontextmanager
    async def _pool(self, size: int):
        """Thread pool for one batch of addresses, abandoned on exit."""
        executor = ThreadPoolExecutor(
            max_workers=max(1, size),
            thread_name_prefix="hostpreferred-ping",
        )
        self._executors.add(executor)
        try:
            yield executor
        finally:
            self._executors.discard(executor)
            executor.shutdown(wait=False, cancel_futures=True)

    async def best_candidate(
        self,
        domain: str,
        ips: Iterable[str],
    ) -> Optional[BestCandidate]:
        """
        Probe all candidate addresses of a domain concurrently.

        Results are taken in completion order, so among equal latencies the
        first one observed wins.

        Returns:
            The lowest-latency reachable address, or None if none replied
        """
        ips = list(ips)
        best: Optional[ProbeResult] = None

        async with self._pool(len(ips)) as executor:
            tasks = [asyncio.ensure_future(self.probe(ip, executor)) for ip in ips]
            try:
                for next_done in asyncio.as_completed(tasks):
                    result = await next_done
                    if not result.is_reachable:
                        continue
                    if best is None or result.mean_rtt_ms < best.mean_rtt_ms:
                        best = result
            finally:
                for task in tasks:
                    task.cancel()

        if best is None:
            logger.warning("No reachable address for %s", domain)
            return None

        logger.info("Best address for %s: %s (%.1f ms)", domain, best.ip, best.mean_rtt_ms)
        return BestCandidate(domain=domain, ip=best.ip, latency_ms=best.mean_rtt_ms)

    def close(self):
        """Stop open thread pools without waiting for in-flight probes."""
        for executor in list(self._executors):
            executor.shutdown(wait=False, cancel_futures=True)
        self._executors.clear()
