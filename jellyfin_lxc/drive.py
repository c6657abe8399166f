from __future__ import annotations

import logging

from .lib.command import Runner, run_cmd
from .lib.host import mount_path, umount_path
from .lib.pct import ContainerRuntime
from .lib.service import systemctl

logger = logging.getLogger(__name__)


def disconnect(
    runtime: ContainerRuntime,
    ct_id: int,
    mount_point: str,
    *,
    runner: Runner = run_cmd,
    dry_run: bool = False,
) -> None:
    """Stop Jellyfin, then unmount the media drive so it can be unplugged."""

    logger.info("Stopping Jellyfin...")
    systemctl(runtime, ct_id, "stop")
    logger.info("Unmounting drive...")
    umount_path(mount_point, runner=runner, dry_run=dry_run)
    logger.info("Safe to remove drive!")


def connect(
    runtime: ContainerRuntime,
    ct_id: int,
    mount_point: str,
    *,
    runner: Runner = run_cmd,
    dry_run: bool = False,
) -> bool:
    """Mount the media drive, then start Jellyfin.

    Jellyfin is only started when the mount succeeds; returns False otherwise.
    """

    logger.info("Mounting drive...")
    if not mount_path(mount_point, runner=runner, dry_run=dry_run):
        logger.error("Mount failed! Check if drive is connected.")
        return False
    logger.info("Starting Jellyfin...")
    systemctl(runtime, ct_id, "start")
    logger.info("Ready! Scan libraries in Jellyfin.")
    return True
