from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from ..errors import DeviceNotFound
from .command import Runner, run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockDevice:
    path: str
    uuid: str
    fs_type: str  # lowercase blkid TYPE; "" when blkid reports none


class DeviceQuery(Protocol):
    """Looks up filesystem metadata for a block device path."""

    def uuid(self, path: str) -> str:
        ...

    def fs_type(self, path: str) -> str:
        ...


class BlkidDeviceQuery:
    """DeviceQuery backed by blkid.

    Lookups are read-only, so they run even when the installer is in dry-run.
    """

    def __init__(self, runner: Runner = run_cmd) -> None:
        self._run = runner

    def _tag(self, path: str, tag: str) -> str:
        # blkid exits 2 for unknown devices; treat as "no value".
        r = self._run(["blkid", "-s", tag, "-o", "value", path], check=False)
        if r.returncode != 0:
            return ""
        return (r.stdout or "").strip()

    def uuid(self, path: str) -> str:
        return self._tag(path, "UUID")

    def fs_type(self, path: str) -> str:
        return self._tag(path, "TYPE").lower()


def inspect(device_path: str, query: DeviceQuery) -> BlockDevice:
    """Resolve UUID and filesystem type for a block device."""

    uuid = query.uuid(device_path).strip()
    if not uuid:
        raise DeviceNotFound(device_path)
    fs_type = query.fs_type(device_path).strip().lower()
    logger.info("Detected filesystem: %s (device=%s uuid=%s)", fs_type or "unknown", device_path, uuid)
    return BlockDevice(path=device_path, uuid=uuid, fs_type=fs_type)
