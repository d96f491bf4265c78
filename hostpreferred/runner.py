"""
Optimization runner.

Orchestrates one optimization pass for a target:
- Resolves every domain through the DoH engine
- Probes each domain's candidates as soon as it is resolved
- Bounds resolution and probing by a single global deadline
- Gates the result on the target's core domains
- Rewrites the target's hosts block only after all checks pass
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from .catalog import get_profile
from .errors import CoreDomainsFailedError, NoReachableIPError, OptimizationTimeoutError
from .hosts_file import get_hosts_path, rewrite_block
from .models import (
    BestCandidate,
    HostEntry,
    OptimizationReport,
    OptimizationTarget,
    OptimizerConfig,
    ResolutionResult,
)
from .prober import LatencyProber
from .query_engine import DoHQueryEngine

logger = logging.getLogger(__name__)


# Type for progress callback
ProgressCallback = Callable[[str, int, int], None]


class HostsOptimizer:
    """
    Selects the fastest reachable address for every domain of a target.

    The best-candidate map is the only state shared between domain tasks;
    each write holds the lock, and the map is read only once all tasks
    finished or the deadline fired.
    """

    def __init__(
        self,
        config: Optional[OptimizerConfig] = None,
        engine: Optional[DoHQueryEngine] = None,
        prober: Optional[LatencyProber] = None,
    ):
        """
        Initialize the optimizer.

        Args:
            config: Tunables (default: OptimizerConfig())
            engine: Name resolution engine (default: built from config)
            prober: Latency prober (default: built from config)
        """
        self.config = config or OptimizerConfig()
        self.engine = engine or DoHQueryEngine(timeout=self.config.resolver_timeout)
        self.prober = prober or LatencyProber(
            count=self.config.probe_count,
            timeout=self.config.probe_timeout,
        )

    async def _optimize_domain(
        self,
        domain: str,
        resolution: ResolutionResult,
        best: dict[str, BestCandidate],
        lock: asyncio.Lock,
    ) -> None:
        """Resolve, probe and commit one domain."""
        ips = await self.engine.resolve(domain)
        if not ips:
            return
        resolution[domain] = ips

        candidate = await self.prober.best_candidate(domain, ips)
        if candidate is None:
            return

        async with lock:
            best[domain] = candidate

    async def optimize(
        self,
        target: OptimizationTarget,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> OptimizationReport:
        """
        Run resolution and probing for every domain of a target.

        Args:
            target: Target to optimize
            progress_callback: Optional callback for progress updates

        Returns:
            OptimizationReport with entries ordered core first

        Raises:
            NoReachableIPError: if no domain produced a reachable address
            CoreDomainsFailedError: if a core domain failed outright
            OptimizationTimeoutError: if the deadline expired first
        """
        profile = get_profile(target)
        domains = profile.domains
        all_domains = domains.all_domains

        started_at = datetime.now()
        resolution: ResolutionResult = {}
        best: dict[str, BestCandidate] = {}
        lock = asyncio.Lock()

        tasks = {
            asyncio.ensure_future(
                self._optimize_domain(domain, resolution, best, lock)
            ): domain
            for domain in all_domains
        }

        done: set = set()
        pending: set = set(tasks)
        total = len(tasks)
        loop = asyncio.get_running_loop()
        deadline_at = loop.time() + self.config.deadline

        # asyncio.wait is the deadline combinator; looping only to report progress
        while pending:
            remaining = deadline_at - loop.time()
            if remaining <= 0:
                break
            finished, pending = await asyncio.wait(
                pending,
                timeout=remaining,
                return_when=asyncio.FIRST_COMPLETED,
            )
            done |= finished
            if progress_callback:
                progress_callback(f"Optimizing {target}", len(done), total)

        timed_out = bool(pending)
        for task in pending:
            task.cancel()

        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.error(
                    "Optimization task for %s crashed: %r",
                    tasks[task], task.exception(),
                )

        # Barrier reached: no writer touches the map past this point
        async with lock:
            final = dict(best)

        pending_domains = {tasks[task] for task in pending}
        missing_core = [d for d in domains.core if d not in final]

        if not final:
            if timed_out:
                raise NoReachableIPError(
                    f"No reachable IP found for any domain "
                    f"(deadline of {self.config.deadline:g}s expired)"
                )
            raise NoReachableIPError()

        if missing_core:
            if timed_out:
                raise OptimizationTimeoutError(
                    self.config.deadline,
                    failed=[d for d in missing_core if d not in pending_domains],
                    pending=[d for d in missing_core if d in pending_domains],
                )
            raise CoreDomainsFailedError(missing_core)

        if timed_out:
            logger.warning(
                "Deadline of %gs reached, core domains optimized; continuing "
                "without %d unfinished domain(s): %s",
                self.config.deadline, len(pending_domains),
                ", ".join(d for d in all_domains if d in pending_domains),
            )

        entries = [
            HostEntry(
                domain=domain,
                ip=final[domain].ip,
                latency_ms=final[domain].latency_ms,
                is_core=domains.is_core(domain),
            )
            for domain in all_domains
            if domain in final
        ]

        return OptimizationReport(
            target=target,
            started_at=started_at,
            completed_at=datetime.now(),
            entries=entries,
            resolution=dict(resolution),
            missing_optional=[d for d in domains.optional if d not in final],
            timed_out=timed_out,
        )

    async def run(
        self,
        target: OptimizationTarget,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> OptimizationReport:
        """
        Optimize a target and write its hosts block.

        The hosts file is touched only after optimization succeeded.
        """
        hosts_path = get_hosts_path(self.config.hosts_path)
        report = await self.optimize(target, progress_callback=progress_callback)

        path = rewrite_block(get_profile(target), report.entries, str(hosts_path))
        report.hosts_path = str(path)
        return report

    async def close(self):
        """Clean up resources."""
        await self.engine.close()
        self.prober.close()


async def optimize_hosts_async(
    target: OptimizationTarget,
    config: Optional[OptimizerConfig] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> OptimizationReport:
    """Run a full optimization pass with a fresh optimizer."""
    optimizer = HostsOptimizer(config=config)
    try:
        return await optimizer.run(target, progress_callback=progress_callback)
    finally:
        await optimizer.close()


def optimize_hosts(
    target: OptimizationTarget,
    config: Optional[OptimizerConfig] = None,
) -> str:
    """
    Optimize a target and update the hosts file.

    Returns:
        Human-readable success summary with the record count

    Raises:
        HostPreferredError: with a descriptive message on any failure
    """
    report = asyncio.run(optimize_hosts_async(target, config=config))
    return report.summary
