"""
Data models for HostPreferred.

Defines structured types for optimization targets, resolver configurations,
probe results and optimization reports.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class OptimizationTarget(Enum):
    """Groups of domains that can be optimized together."""
    GITHUB = "GitHub"
    CLOUDFLARE = "Cloudflare"
    NEXUSMODS = "NexusMods"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: str) -> "OptimizationTarget":
        """Look up a target by member name or display name (case-insensitive)."""
        key = name.strip().lower()
        for target in cls:
            if key in (target.name.lower(), target.value.lower()):
                return target
        raise ValueError(
            f"Unknown target: {name}. Available: {[t.value for t in cls]}"
        )


@dataclass(frozen=True)
class DomainList:
    """Mandatory and best-effort domains of one target."""
    core: tuple[str, ...]
    optional: tuple[str, ...] = ()

    @property
    def all_domains(self) -> list[str]:
        """Core domains first, then optional ones, in catalog order."""
        return list(self.core) + list(self.optional)

    def is_core(self, domain: str) -> bool:
        return domain in self.core


@dataclass(frozen=True)
class TargetProfile:
    """Static configuration of a target: its domains and hosts block markers."""
    target: OptimizationTarget
    domains: DomainList
    start_marker: str
    end_marker: str


@dataclass(frozen=True)
class ResolverConfig:
    """Configuration for a DNS-over-HTTPS resolver."""
    name: str
    doh_url: str
    description: Optional[str] = None


@dataclass(frozen=True)
class OptimizerConfig:
    """Tunables of one optimization pass."""
    resolver_timeout: float = 2.0   # per DoH attempt
    probe_count: int = 3            # echo requests per IP
    probe_timeout: float = 1.0      # per echo request
    deadline: float = 10.0          # resolution + probing, all domains
    hosts_path: Optional[str] = None


# Domain name -> resolved addresses; unresolved domains are absent
ResolutionResult = dict[str, list[str]]


@dataclass
class ProbeResult:
    """Outcome of probing a single IP address."""
    ip: str
    sent: int
    rtts_ms: list[float] = field(default_factory=list)
    mean_rtt_ms: Optional[float] = None

    @property
    def received(self) -> int:
        return len(self.rtts_ms)

    @property
    def is_reachable(self) -> bool:
        """At least one probe got a reply."""
        return self.mean_rtt_ms is not None

    @property
    def loss_rate(self) -> float:
        """Percentage of probes without a reply."""
        if self.sent == 0:
            return 0.0
        return ((self.sent - self.received) / self.sent) * 100


@dataclass(frozen=True)
class BestCandidate:
    """Lowest-latency reachable address found for a domain."""
    domain: str
    ip: str
    latency_ms: float


@dataclass(frozen=True)
class HostEntry:
    """One "IP domain" line of a hosts block."""
    domain: str
    ip: str
    latency_ms: float
    is_core: bool = False

    def to_line(self) -> str:
        return f"{self.ip} {self.domain}"


@dataclass
class OptimizationReport:
    """Complete result of an optimization pass."""
    target: OptimizationTarget
    started_at: datetime
    completed_at: datetime

    # Entries in write order: core domains first, then optional
    entries: list[HostEntry] = field(default_factory=list)

    resolution: ResolutionResult = field(default_factory=dict)
    missing_optional: list[str] = field(default_factory=list)

    # Deadline fired but every core domain already had a candidate
    timed_out: bool = False

    hosts_path: Optional[str] = None

    @property
    def record_count(self) -> int:
        return len(self.entries)

    @property
    def duration_seconds(self) -> float:
        """Total optimization duration in seconds."""
        return (self.completed_at - self.started_at).total_seconds()

    @property
    def summary(self) -> str:
        """Human-readable success message."""
        return (
            f"{self.target} hosts optimization succeeded: "
            f"updated {self.record_count} records."
        )

    @property
    def fastest(self) -> Optional[HostEntry]:
        """Entry with the lowest latency (if any)."""
        if not self.entries:
            return None
        return min(self.entries, key=lambda e: e.latency_ms)
