"""
Hosts file management.

Locates the system hosts file, rewrites the block owned by one optimization
target, and backs the file up / restores it.
"""

import errno
import logging
import os
import platform
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Sequence

from .errors import (
    BackupNotFoundError,
    HostsFileReadError,
    HostsFileWriteError,
    HostsPathError,
)
from .models import HostEntry, TargetProfile

logger = logging.getLogger(__name__)


HOSTS_FILE_ENV = "HOSTPREFERRED_HOSTS_FILE"
BACKUP_HOSTS_FILENAME = "hosts.bak.hostpreferred"

# Undecodable bytes pass through a rewrite unchanged
ENCODING = "utf-8"
ERRORS = "surrogateescape"


def get_hosts_path(hosts_path: Optional[str] = None) -> Path:
    """
    Get the hosts file location.

    Precedence: explicit argument, HOSTPREFERRED_HOSTS_FILE, platform default.

    Raises:
        HostsPathError: on Windows without SystemRoot, or an unknown platform
    """
    if hosts_path:
        return Path(hosts_path)

    override = os.environ.get(HOSTS_FILE_ENV)
    if override:
        return Path(override)

    system = platform.system().lower()
    if system == "windows":
        system_root = os.environ.get("SystemRoot")
        if not system_root:
            raise HostsPathError(
                "SystemRoot environment variable is not set; "
                "cannot locate the Windows hosts file"
            )
        return Path(system_root) / "System32" / "drivers" / "etc" / "hosts"
    if system in ("linux", "darwin") or system.endswith("bsd"):
        return Path("/etc/hosts")
    raise HostsPathError(f"Unsupported platform: {system}")


def get_hosts_dir(hosts_path: Optional[str] = None) -> str:
    """Get the directory containing the hosts file."""
    path = get_hosts_path(hosts_path)
    parent = path.parent
    if str(parent) in ("", "."):
        parent = path.resolve().parent
    return str(parent)


def get_backup_path(hosts_path: Optional[str] = None) -> Path:
    """Backup lives next to the hosts file."""
    return get_hosts_path(hosts_path).with_name(BACKUP_HOSTS_FILENAME)


def save_current_hosts(hosts_path: Optional[str] = None) -> str:
    """
    Copy the hosts file to its backup location.

    Returns:
        The backup path
    """
    path = get_hosts_path(hosts_path)
    backup = get_backup_path(hosts_path)
    if not path.exists():
        raise HostsFileReadError(f"Hosts file does not exist: {path}")

    try:
        shutil.copyfile(path, backup)
    except OSError as e:
        raise HostsFileWriteError(f"Failed to write backup file {backup}: {e}") from e

    logger.info("Backed up %s to %s", path, backup)
    return str(backup)


def revert_hosts(hosts_path: Optional[str] = None) -> str:
    """
    Restore the hosts file from its backup.

    Returns:
        Confirmation message
    """
    path = get_hosts_path(hosts_path)
    backup = get_backup_path(hosts_path)
    if not backup.exists():
        raise BackupNotFoundError(f"Backup file {backup} does not exist; nothing to restore")

    try:
        shutil.copyfile(backup, path)
    except OSError as e:
        raise HostsFileWriteError(
            f"Failed to write hosts file {path}, try running with administrator "
            f"privileges: {e}"
        ) from e

    logger.info("Restored %s from %s", path, backup)
    return "Hosts file restored from backup."


def save_content_to_file(
    filename: str,
    content: str,
    hosts_path: Optional[str] = None,
) -> str:
    """Write text to a file next to the hosts file and return its path."""
    target = get_hosts_path(hosts_path).with_name(filename)
    try:
        target.write_text(content, encoding=ENCODING)
    except OSError as e:
        raise HostsFileWriteError(f"Failed to write {target}: {e}") from e
    return str(target)


def render_block(
    lines: Sequence[str],
    start_marker: str,
    end_marker: str,
    entries: Sequence[HostEntry],
) -> list[str]:
    """
    Replace a target's block inside hosts file lines.

    Lines between the target's own start and end markers (inclusive) are
    dropped together with the blank separator right before the block;
    everything else is copied verbatim. A new block is appended when there
    are entries to write, otherwise the target ends up without a block.

    Args:
        lines: Current file content, one item per line without newline
        start_marker: The target's start marker line
        end_marker: The target's end marker line
        entries: Entries to write, in order

    Returns:
        New file content as a list of lines
    """
    new_lines: list[str] = []
    in_block = False

    for line in lines:
        stripped = line.strip()
        if in_block:
            if stripped == end_marker:
                in_block = False
            continue
        if stripped == start_marker:
            in_block = True
            if new_lines and not new_lines[-1].strip():
                new_lines.pop()
            continue
        new_lines.append(line)

    if in_block:
        logger.warning("Block %r has no end marker; dropped it up to end of file", start_marker)

    if entries:
        new_lines.append("")
        new_lines.append(start_marker)
        new_lines.extend(entry.to_line() for entry in entries)
        new_lines.append(end_marker)

    return new_lines


class HostsFile:
    """A hosts file on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read_lines(self) -> list[str]:
        """Read the file, one item per line."""
        try:
            with open(self.path, "r", encoding=ENCODING, errors=ERRORS) as f:
                return f.read().splitlines()
        except OSError as e:
            raise HostsFileReadError(f"Cannot open hosts file for reading: {self.path}: {e}") from e

    def write_lines(self, lines: Sequence[str]) -> None:
        """
        Replace the file content atomically.

        Content goes to a temporary file in the same directory which then
        replaces the hosts file, so readers see either the old or the new
        content in full.
        """
        content = "".join(f"{line}\n" for line in lines)
        tmp_path: Optional[str] = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                dir=self.path.parent,
            )
            with os.fdopen(fd, "w", encoding=ENCODING, errors=ERRORS) as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            shutil.copymode(self.path, tmp_path)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            if e.errno == errno.EBUSY:
                # rename(2) onto a mount point, e.g. /etc/hosts in a container
                raise HostsFileWriteError(
                    f"Cannot replace hosts file {self.path}: it is a mount point "
                    f"(bind-mounted, as in a container) and cannot be replaced "
                    f"atomically. Edit the file on the host instead: {e}"
                ) from e
            raise HostsFileWriteError(
                f"Cannot open hosts file for writing: {self.path}. "
                f"Try running with administrator privileges: {e}"
            ) from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def write_block(self, profile: TargetProfile, entries: Sequence[HostEntry]) -> None:
        """Rewrite the block owned by a target."""
        lines = self.read_lines()
        new_lines = render_block(lines, profile.start_marker, profile.end_marker, entries)
        self.write_lines(new_lines)

        for entry in entries:
            logger.info("Updated %s -> %s", entry.domain, entry.ip)
        if not entries:
            logger.info("Removed %s block from %s", profile.target, self.path)


def rewrite_block(
    profile: TargetProfile,
    entries: Sequence[HostEntry],
    hosts_path: Optional[str] = None,
) -> Path:
    """Rewrite a target's block in the hosts file and return the file path."""
    path = get_hosts_path(hosts_path)
    HostsFile(path).write_block(profile, entries)
    return path
