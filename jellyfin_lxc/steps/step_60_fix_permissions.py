from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.host import chown_tree
from ..lib.idmap import compute_host_ids, parse_id
from ..lib.service import JELLYFIN_USER
from ..state_store import record_decision
from ..toolkit import Toolkit

logger = logging.getLogger(__name__)


class FixPermissionsStep:
    step_id = "60_fix_permissions"
    title = "Map media ownership to the container's jellyfin user"

    def __init__(self, tk: Toolkit) -> None:
        self.tk = tk

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = InstallConfig(state.get("config") or {})
        if cfg.dry_run:
            # The container does not exist yet, so there is no uid to read.
            logger.info("Would chown %s to the mapped jellyfin uid/gid", cfg.usb_mount)
            return state

        runtime = self.tk.runtime
        uid = parse_id(runtime.exec(cfg.ct_id, ["id", "-u", JELLYFIN_USER]).stdout)
        gid = parse_id(runtime.exec(cfg.ct_id, ["id", "-g", JELLYFIN_USER]).stdout)

        ids = compute_host_ids(uid, gid)
        chown_tree(cfg.usb_mount, ids, runner=self.tk.runner)

        record_decision(state, "host_uid", ids.host_uid)
        record_decision(state, "host_gid", ids.host_gid)
        return state
