from __future__ import annotations

import logging

from .errors import ContainerError, PackageInstallFailure
from .lib.pct import ContainerRuntime
from .lib.service import JELLYFIN_PACKAGES, systemctl

logger = logging.getLogger(__name__)


def update_jellyfin(runtime: ContainerRuntime, ct_id: int) -> str:
    """Upgrade the Jellyfin packages in a container and restart the service.

    Returns the ``systemctl status`` text for display.
    """

    if not runtime.exists(ct_id):
        raise ContainerError(f"Container {ct_id} does not exist")
    if not runtime.is_running(ct_id):
        raise ContainerError(f"Container {ct_id} is not running (pct start {ct_id})")

    logger.info("Updating Jellyfin in container %s", ct_id)
    runtime.exec(ct_id, ["apt-get", "update"])
    try:
        runtime.exec(
            ct_id,
            ["env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "--only-upgrade", "-y", *JELLYFIN_PACKAGES],
        )
    except ContainerError as e:
        raise PackageInstallFailure(JELLYFIN_PACKAGES, str(e)) from e

    systemctl(runtime, ct_id, "restart")
    # status exits non-zero for inactive units; the text is still what we want.
    r = systemctl(runtime, ct_id, "status", extra=["--no-pager"], check=False)
    logger.info("Jellyfin update complete")
    return r.stdout or ""
