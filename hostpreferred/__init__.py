"""
HostPreferred - latency-based hosts file optimizer.

Picks the fastest reachable IP for every domain of a target and pins it
in the system hosts file.
"""

__version__ = "1.0.0"
__author__ = "HostPreferred Team"

from .models import OptimizationReport, OptimizationTarget, OptimizerConfig
from .query_engine import DoHQueryEngine
from .prober import LatencyProber
from .runner import HostsOptimizer, optimize_hosts

__all__ = [
    "__version__",
    "OptimizationReport",
    "OptimizationTarget",
    "OptimizerConfig",
    "DoHQueryEngine",
    "LatencyProber",
    "HostsOptimizer",
    "optimize_hosts",
]
