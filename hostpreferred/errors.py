"""
Exceptions raised by HostPreferred.

Every fatal condition of an operation is a HostPreferredError subclass
carrying a descriptive message. Per-resolver and per-probe failures are
absorbed where they happen and never show up here.
"""

from typing import Iterable


class HostPreferredError(Exception):
    """Base class for all errors surfaced to callers."""


# Environment errors

class HostsPathError(HostPreferredError):
    """The hosts file location could not be determined."""


class HostsFileReadError(HostPreferredError):
    """The hosts file is missing or unreadable."""


class HostsFileWriteError(HostPreferredError):
    """The hosts file could not be written (usually missing privileges)."""


class BackupNotFoundError(HostPreferredError):
    """No backup of the hosts file exists."""


# Partial and total result errors

class CoreDomainsFailedError(HostPreferredError):
    """One or more core domains produced no reachable address."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(
            f"Core domains could not be optimized: {', '.join(self.missing)}"
        )


class OptimizationTimeoutError(HostPreferredError):
    """The deadline expired before every core domain had a candidate."""

    def __init__(self, deadline: float, failed: Iterable[str], pending: Iterable[str]):
        self.deadline = deadline
        self.failed = list(failed)
        self.pending = list(pending)
        parts = []
        if self.pending:
            parts.append(f"timed out: {', '.join(self.pending)}")
        if self.failed:
            parts.append(f"failed: {', '.join(self.failed)}")
        super().__init__(
            f"Operation timed out after {deadline:g}s before core domains "
            f"were optimized ({'; '.join(parts)})"
        )


class NoReachableIPError(HostPreferredError):
    """Not a single domain produced a reachable address."""

    def __init__(self, message: str = "No reachable IP found for any domain"):
        super().__init__(message)
