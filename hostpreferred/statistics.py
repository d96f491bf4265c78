"""
Latency statistics.

Aggregates probe round-trip times into per-address means and summarizes
the latencies of an optimization report.
"""

from typing import Optional, Sequence

import numpy as np

from .models import OptimizationReport


class StatisticsEngine:
    """Calculates latency statistics from probe samples."""

    @staticmethod
    def mean_rtt(rtts_ms: Sequence[float]) -> Optional[float]:
        """
        Arithmetic mean of the replies that came back.

        Returns:
            Mean RTT in milliseconds, or None when there were no replies
        """
        if not rtts_ms:
            return None
        return float(np.mean(np.asarray(rtts_ms, dtype=float)))

    @staticmethod
    def summarize(report: OptimizationReport) -> dict:
        """Min / max / average / median latency across the selected entries."""
        if not report.entries:
            return {"count": 0, "min": 0.0, "max": 0.0, "avg": 0.0, "median": 0.0}

        latencies = np.array([e.latency_ms for e in report.entries])
        return {
            "count": int(latencies.size),
            "min": float(np.min(latencies)),
            "max": float(np.max(latencies)),
            "avg": float(np.mean(latencies)),
            "median": float(np.median(latencies)),
        }
