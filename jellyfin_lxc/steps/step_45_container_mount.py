from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.lxc_conf import add_bind_mount, conf_path_for
from ..state_store import record_decision
from ..toolkit import Toolkit

logger = logging.getLogger(__name__)


class ContainerMountStep:
    step_id = "45_container_mount"
    title = "Bind media mount into container"

    def __init__(self, tk: Toolkit) -> None:
        self.tk = tk

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = InstallConfig(state.get("config") or {})
        conf = conf_path_for(cfg.ct_id, self.tk.paths.lxc_conf_dir)

        bm = add_bind_mount(conf, cfg.usb_mount, cfg.media_path, dry_run=cfg.dry_run)
        record_decision(state, "bind_mount", bm.as_line())
        return state
