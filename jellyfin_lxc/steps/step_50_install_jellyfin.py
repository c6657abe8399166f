from __future__ import annotations

import logging
from typing import Any, Dict, Sequence

from ..errors import ContainerError, PackageInstallFailure
from ..install_config import InstallConfig
from ..lib.service import JELLYFIN_INSTALL_SCRIPT, systemctl
from ..toolkit import Toolkit

logger = logging.getLogger(__name__)

BASE_PACKAGES = ("curl", "gnupg")


class InstallJellyfinStep:
    step_id = "50_install_jellyfin"
    title = "Start container and install Jellyfin"

    def __init__(self, tk: Toolkit) -> None:
        self.tk = tk

    def _apt(self, ct_id: int, argv: Sequence[str]) -> None:
        self.tk.runtime.exec(ct_id, ["env", "DEBIAN_FRONTEND=noninteractive", *argv])

    def _install(self, ct_id: int, argv: Sequence[str], packages: Sequence[str]) -> None:
        try:
            self._apt(ct_id, argv)
        except ContainerError as e:
            raise PackageInstallFailure(packages, str(e)) from e

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = InstallConfig(state.get("config") or {})
        ct_id = cfg.ct_id
        runtime = self.tk.runtime

        if not runtime.is_running(ct_id):
            logger.info("Starting container %s", ct_id)
            runtime.start(ct_id)
        runtime.wait_ready(ct_id, timeout_s=cfg.ready_timeout_s)

        logger.info("Installing Jellyfin")
        self._apt(ct_id, ["apt-get", "update"])
        self._apt(ct_id, ["apt-get", "upgrade", "-y"])
        self._install(ct_id, ["apt-get", "install", "-y", *BASE_PACKAGES], BASE_PACKAGES)
        self._install(ct_id, ["bash", "-c", f"curl -fsSL {JELLYFIN_INSTALL_SCRIPT} | bash"], ["jellyfin"])

        systemctl(runtime, ct_id, "enable")
        systemctl(runtime, ct_id, "start")
        logger.info("Jellyfin installed and running")
        return state
