from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    pve_version: str = "/etc/pve/.version"
    fstab: str = "/etc/fstab"
    lxc_conf_dir: str = "/etc/pve/lxc"
    state_default: str = "/var/lib/jellyfin-lxc/state.json"
    log_default: str = "/var/log/jellyfin-lxc.log"


PATHS = Paths()
