from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.pct import ContainerSpec
from ..toolkit import Toolkit

logger = logging.getLogger(__name__)


def container_spec(cfg: InstallConfig, template_volume: str) -> ContainerSpec:
    return ContainerSpec(
        ct_id=cfg.ct_id,
        hostname=cfg.hostname,
        password=cfg.password,
        template=template_volume,
        cores=cfg.cores,
        memory_mb=cfg.memory_mb,
        disk_gb=cfg.disk_gb,
        storage=cfg.storage,
        bridge=cfg.bridge,
    )


class CreateContainerStep:
    step_id = "30_create_container"
    title = "Create unprivileged LXC container"

    def __init__(self, tk: Toolkit) -> None:
        self.tk = tk

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = InstallConfig(state.get("config") or {})
        exe = state.get("execution") or {}
        volume = exe.get("template_volume") or self.tk.templates.volume_id(cfg.template)

        self.tk.runtime.create(container_spec(cfg, volume))
        logger.info("Container %s created", cfg.ct_id)
        return state
