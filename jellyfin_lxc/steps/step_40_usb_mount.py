from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.block import inspect
from ..lib.fstab import MOUNT_POLICIES, find_entry, register_mount
from ..state_store import record_decision
from ..toolkit import Toolkit

logger = logging.getLogger(__name__)


class UsbMountStep:
    step_id = "40_usb_mount"
    title = "Register USB drive in /etc/fstab"

    def __init__(self, tk: Toolkit) -> None:
        self.tk = tk

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = InstallConfig(state.get("config") or {})

        device = inspect(cfg.usb_device, self.tk.devices)
        already = find_entry(self.tk.mount_table.read_lines(), device.uuid) is not None

        entry = register_mount(
            device,
            cfg.usb_mount,
            table=self.tk.mount_table,
            packages=self.tk.packages,
            dry_run=cfg.dry_run,
        )

        record_decision(state, "usb_uuid", device.uuid)
        record_decision(state, "usb_fs_type", device.fs_type)
        record_decision(state, "mount_policy", device.fs_type if device.fs_type in MOUNT_POLICIES else "fallback")
        record_decision(state, "fstab_already_registered", already)
        record_decision(state, "fstab_line", entry.as_line())
        return state
