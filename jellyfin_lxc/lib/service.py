from __future__ import annotations

import logging
from typing import Sequence

from .command import CmdResult
from .pct import ContainerRuntime

logger = logging.getLogger(__name__)

JELLYFIN_UNIT = "jellyfin"
JELLYFIN_PACKAGES = ("jellyfin", "jellyfin-server", "jellyfin-web")
JELLYFIN_INSTALL_SCRIPT = "https://repo.jellyfin.org/install-debuntu.sh"
JELLYFIN_USER = "jellyfin"
JELLYFIN_WEB_PORT = 8096


def systemctl(
    runtime: ContainerRuntime,
    ct_id: int,
    action: str,
    unit: str = JELLYFIN_UNIT,
    *,
    extra: Sequence[str] = (),
    check: bool = True,
) -> CmdResult:
    logger.info("systemctl %s %s in container %s", action, unit, ct_id)
    return runtime.exec(ct_id, ["systemctl", action, unit, *extra], check=check)
