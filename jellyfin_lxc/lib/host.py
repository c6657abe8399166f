from __future__ import annotations

import logging
import os
from pathlib import Path

from .command import Runner, run_cmd
from .idmap import IdMapping

logger = logging.getLogger(__name__)


def is_proxmox_host(version_file: str) -> bool:
    return Path(version_file).is_file()


def is_root() -> bool:
    return os.geteuid() == 0


def chown_tree(path: str, ids: IdMapping, *, runner: Runner = run_cmd, dry_run: bool = False) -> None:
    """Recursively hand a host directory to the mapped container ids."""

    logger.info("Setting ownership to %s on host path %s", ids.host_owner, path)
    runner(["chown", "-R", ids.host_owner, path], dry_run=dry_run)


def mount_path(mount_point: str, *, runner: Runner = run_cmd, dry_run: bool = False) -> bool:
    """Mount an fstab-declared mount point; False when mount fails."""

    r = runner(["mount", mount_point], check=False, dry_run=dry_run)
    if r.returncode != 0:
        logger.error("mount %s failed (%d): %s", mount_point, r.returncode, (r.stderr or "").strip())
        return False
    return True


def umount_path(mount_point: str, *, runner: Runner = run_cmd, dry_run: bool = False) -> None:
    runner(["umount", mount_point], dry_run=dry_run)
