"""
Cross-platform DNS cache utilities.

Flushes the OS DNS cache so a freshly written hosts block takes effect
immediately, and checks for the privileges needed to write the hosts file.
"""

import os
import platform
import subprocess
from typing import Tuple


def get_platform() -> str:
    """Get the current platform name."""
    system = platform.system().lower()
    if system == "darwin":
        return "macos"
    return system  # "windows" or "linux"


def _run(cmd: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        timeout=10,
    )


def flush_dns_cache() -> Tuple[bool, str]:
    """
    Attempt to flush the OS DNS cache.

    Returns:
        Tuple of (success: bool, message: str)

    Note:
        This typically requires elevated privileges.
    """
    system = get_platform()

    try:
        if system == "windows":
            result = _run(["ipconfig", "/flushdns"])
            if result.returncode == 0:
                return True, "Windows DNS cache flushed successfully"
            return False, f"Failed to flush: {result.stderr}"

        elif system == "linux":
            for cmd, label in (
                (["resolvectl", "flush-caches"], "resolvectl"),
                (["systemd-resolve", "--flush-caches"], "systemd-resolve"),
            ):
                try:
                    result = _run(cmd)
                except FileNotFoundError:
                    continue
                if result.returncode == 0:
                    return True, f"Linux DNS cache flushed ({label})"
            return False, "Could not flush DNS cache - try manually"

        elif system == "macos":
            _run(["dscacheutil", "-flushcache"])
            _run(["killall", "-HUP", "mDNSResponder"])
            return True, "macOS DNS cache flush attempted"

        else:
            return False, f"Unsupported platform: {system}"

    except subprocess.TimeoutExpired:
        return False, "DNS cache flush timed out"
    except FileNotFoundError as e:
        return False, f"Command not found: {e}"
    except PermissionError:
        return False, "Elevated privileges required to flush DNS cache"


def check_elevated_privileges() -> bool:
    """Check if running with elevated privileges."""
    if get_platform() == "windows":
        try:
            import ctypes
            return ctypes.windll.shell32.IsUserAnAdmin() != 0
        except (AttributeError, OSError):
            return False
    return os.geteuid() == 0
