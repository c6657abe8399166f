from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence, Tuple

from ..errors import CommandError, DeviceNotFound, WriteFailure
from .block import BlockDevice
from .command import Runner, run_cmd
from .idmap import UNPRIVILEGED_OFFSET
from .pkg import PackageInstaller

logger = logging.getLogger(__name__)

DEFAULT_FSTAB_PATH = "/etc/fstab"


def _escape(value: str) -> str:
    return value.replace("\\", "\\134").replace(" ", "\\040").replace("\t", "\\011")


def _unescape(value: str) -> str:
    return value.replace("\\040", " ").replace("\\011", "\t").replace("\\134", "\\")


@dataclass(frozen=True)
class MountEntry:
    uuid: str
    mount_point: str
    fs_type: str
    options: str
    dump: int
    passno: int

    def as_line(self) -> str:
        return " ".join(
            (
                f"UUID={self.uuid}",
                _escape(self.mount_point),
                self.fs_type,
                self.options or "defaults",
                str(self.dump),
                str(self.passno),
            )
        )

    @classmethod
    def parse_line(cls, line: str) -> Optional["MountEntry"]:
        """Parse a ``UUID=`` fstab line; None for comments and other specs."""

        s = line.strip()
        if not s or s.startswith("#"):
            return None
        fields = s.split()
        if len(fields) < 4 or not fields[0].startswith("UUID="):
            return None
        try:
            dump = int(fields[4]) if len(fields) > 4 else 0
            passno = int(fields[5]) if len(fields) > 5 else 0
        except ValueError:
            return None
        return cls(
            uuid=fields[0][len("UUID="):],
            mount_point=_unescape(fields[1]),
            fs_type=fields[2],
            options=fields[3],
            dump=dump,
            passno=passno,
        )


@dataclass(frozen=True)
class MountPolicy:
    packages: Tuple[str, ...]
    options: str
    dump: int
    passno: int
    fstab_type: Optional[str] = None  # None: use the detected type

    def entry_for(self, device: BlockDevice, mount_point: str) -> MountEntry:
        return MountEntry(
            uuid=device.uuid,
            mount_point=mount_point,
            fs_type=self.fstab_type or device.fs_type or "auto",
            options=self.options,
            dump=self.dump,
            passno=self.passno,
        )


# exFAT has no POSIX ownership; hand files to the container's root-mapped range.
EXFAT_OPTIONS = f"defaults,nofail,uid={UNPRIVILEGED_OFFSET},gid={UNPRIVILEGED_OFFSET},umask=000"

MOUNT_POLICIES = {
    "ntfs": MountPolicy(packages=("ntfs-3g",), options="defaults,nofail", dump=0, passno=2, fstab_type="ntfs-3g"),
    "exfat": MountPolicy(packages=("exfatprogs", "exfat-fuse"), options=EXFAT_OPTIONS, dump=0, passno=0),
}

FALLBACK_POLICY = MountPolicy(packages=(), options="defaults,nofail", dump=0, passno=2)


def select_policy(fs_type: str) -> MountPolicy:
    policy = MOUNT_POLICIES.get((fs_type or "").lower())
    if policy is None:
        logger.info("No dedicated mount policy for filesystem %r; using defaults", fs_type)
        return FALLBACK_POLICY
    return policy


class MountTableWriter(Protocol):
    """Append-only access to the persistent mount table."""

    def read_lines(self) -> list[str]:
        ...

    def append(self, line: str) -> int:
        """Append one line; returns a token accepted by rollback()."""
        ...

    def rollback(self, token: int) -> None:
        ...

    def apply(self) -> None:
        """Make the table take effect (mount -a). Raises WriteFailure."""
        ...


class FstabFile:
    def __init__(self, path: str = DEFAULT_FSTAB_PATH, *, runner: Runner = run_cmd, dry_run: bool = False) -> None:
        self.path = Path(path)
        self._run = runner
        self.dry_run = dry_run

    def read_lines(self) -> list[str]:
        if not self.path.exists():
            return []
        return self.path.read_text(encoding="utf-8").splitlines()

    def append(self, line: str) -> int:
        size = self.path.stat().st_size if self.path.exists() else 0
        if self.dry_run:
            logger.info("Would append to %s: %s", str(self.path), line)
            return size

        prefix = ""
        if size:
            with self.path.open("rb") as f:
                f.seek(-1, os.SEEK_END)
                if f.read(1) != b"\n":
                    prefix = "\n"
        with self.path.open("a", encoding="utf-8") as f:
            f.write(f"{prefix}{line}\n")
        return size

    def rollback(self, token: int) -> None:
        if self.dry_run:
            return
        with self.path.open("r+b") as f:
            f.truncate(token)
        logger.warning("Rolled back %s to %d bytes", str(self.path), token)

    def apply(self) -> None:
        try:
            self._run(["mount", "-a"], dry_run=self.dry_run)
        except CommandError as e:
            raise WriteFailure(f"mount -a failed ({e.returncode}): {e.stderr.strip()}") from e


def find_entry(lines: Sequence[str], uuid: str) -> Optional[Tuple[str, Optional[MountEntry]]]:
    for line in lines:
        if uuid in line:
            return line, MountEntry.parse_line(line)
    return None


def register_mount(
    device: BlockDevice,
    mount_point: str,
    *,
    table: MountTableWriter,
    packages: PackageInstaller,
    dry_run: bool = False,
) -> MountEntry:
    """Idempotently add a persistent mount for ``device`` and apply it.

    If the apply step fails the appended line is removed again before
    WriteFailure is raised, so a rerun starts from the original table.
    dry_run only covers creating the mount point; the table and installer
    carry their own dry-run setting.
    """

    if not device.uuid:
        raise DeviceNotFound(device.path)

    mp = Path(mount_point)
    if dry_run:
        logger.info("Would create mount point %s", str(mp))
    else:
        mp.mkdir(parents=True, exist_ok=True)

    policy = select_policy(device.fs_type)
    wanted = policy.entry_for(device, mount_point)

    existing = find_entry(table.read_lines(), device.uuid)
    if existing is not None:
        line, parsed = existing
        logger.info("UUID %s already in mount table, leaving it unchanged: %s", device.uuid, line.strip())
        return parsed or wanted

    packages.install(list(policy.packages))

    token = table.append(wanted.as_line())
    logger.info("Added mount table entry: %s", wanted.as_line())
    try:
        table.apply()
    except WriteFailure:
        table.rollback(token)
        raise
    logger.info("USB drive mounted at %s", mount_point)
    return wanted
