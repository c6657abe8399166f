from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..install_config import InstallConfig
from ..lib.service import JELLYFIN_WEB_PORT
from ..toolkit import Toolkit

logger = logging.getLogger(__name__)


def completion_report(cfg: InstallConfig, ip: str) -> List[str]:
    url = f"http://{ip}:{JELLYFIN_WEB_PORT}"
    return [
        "=== JELLYFIN SETUP COMPLETE ===",
        "",
        f"Container ID:     {cfg.ct_id}",
        f"IP Address:       {ip}",
        f"Web Interface:    {url}",
        f"Media Location:   {cfg.media_path} (in container)",
        f"USB Mount:        {cfg.usb_mount} (on host)",
        "",
        "Next steps:",
        f"1. Open {url} in your browser",
        "2. Complete the Jellyfin setup wizard",
        f"3. Add media library pointing to {cfg.media_path}",
    ]


class ReportStep:
    step_id = "90_report"
    title = "Show connection details"

    def __init__(self, tk: Toolkit) -> None:
        self.tk = tk

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = InstallConfig(state.get("config") or {})

        r = self.tk.runtime.exec(cfg.ct_id, ["hostname", "-I"], check=False)
        addrs = (r.stdout or "").split()
        ip = addrs[0] if addrs else "<container-ip>"
        if not addrs:
            logger.warning("Could not read container IP address")

        state.setdefault("execution", {})["container_ip"] = ip
        for line in completion_report(cfg, ip):
            self.tk.out(line)
        return state
