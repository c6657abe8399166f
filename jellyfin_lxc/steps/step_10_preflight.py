from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import ContainerError, ProvisioningError
from ..install_config import InstallConfig
from ..lib.host import is_proxmox_host
from ..toolkit import Toolkit

logger = logging.getLogger(__name__)


class PreflightStep:
    step_id = "10_preflight"
    title = "Check host and settings"

    def __init__(self, tk: Toolkit) -> None:
        self.tk = tk

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = InstallConfig(state.get("config") or {})

        if not is_proxmox_host(self.tk.paths.pve_version):
            raise ProvisioningError("This must be run on a Proxmox VE host")
        if not self.tk.is_root():
            raise ProvisioningError("This must be run as root")
        logger.info("Running on Proxmox VE")

        cfg.validate()

        if self.tk.runtime.exists(cfg.ct_id):
            raise ContainerError(f"Container {cfg.ct_id} already exists")

        return state
