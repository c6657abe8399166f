from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..errors import ContainerError

logger = logging.getLogger(__name__)

PVE_LXC_CONF_DIR = "/etc/pve/lxc"

# Proxmox accepts mp0..mp255
MAX_MOUNT_POINTS = 256

_MP_RE = re.compile(r"^mp(\d+):\s*(.+)$")


@dataclass(frozen=True)
class BindMount:
    index: int
    host_path: str
    container_path: str

    def as_line(self) -> str:
        return f"mp{self.index}: {self.host_path},mp={self.container_path},backup=0"


def conf_path_for(ct_id: int, conf_dir: str = PVE_LXC_CONF_DIR) -> Path:
    return Path(conf_dir) / f"{ct_id}.conf"


def parse_bind_mounts(lines: List[str]) -> List[BindMount]:
    """Mount point declarations from the main section of a container config.

    Snapshot sections ("[name]") repeat mpN keys; only the live config counts.
    """

    mounts: List[BindMount] = []
    for raw in lines:
        line = raw.strip()
        if line.startswith("["):
            break
        m = _MP_RE.match(line)
        if not m:
            continue
        parts = m.group(2).split(",")
        host_path = parts[0].strip()
        container_path = ""
        for opt in parts[1:]:
            key, _, value = opt.partition("=")
            if key.strip() == "mp":
                container_path = value.strip()
        mounts.append(BindMount(index=int(m.group(1)), host_path=host_path, container_path=container_path))
    return mounts


def next_free_index(mounts: List[BindMount]) -> int:
    used = {m.index for m in mounts}
    for i in range(MAX_MOUNT_POINTS):
        if i not in used:
            return i
    raise ContainerError("No free mount point slot (mp0..mp255 all used)")


def add_bind_mount(conf_path: str | Path, host_path: str, container_path: str, *, dry_run: bool = False) -> BindMount:
    """Append an mpN declaration binding host_path into the container.

    Existing declarations for the same host path are returned unchanged.
    """

    p = Path(conf_path)
    if not p.exists() and not dry_run:
        raise ContainerError(f"Container config not found: {p}")
    lines = p.read_text(encoding="utf-8").splitlines() if p.exists() else []

    mounts = parse_bind_mounts(lines)
    existing: Optional[BindMount] = next((m for m in mounts if m.host_path == host_path), None)
    if existing is not None:
        logger.info("Bind mount already configured: %s", existing.as_line())
        return existing

    bm = BindMount(index=next_free_index(mounts), host_path=host_path, container_path=container_path)
    if dry_run:
        logger.info("Would append to %s: %s", str(p), bm.as_line())
        return bm

    if any(line.strip().startswith("[") for line in lines):
        # An appended line would land inside the last snapshot section.
        raise ContainerError(f"{p} has snapshot sections; add the mount point with pct set instead")

    text = p.read_text(encoding="utf-8")
    prefix = "" if not text or text.endswith("\n") else "\n"
    with p.open("a", encoding="utf-8") as f:
        f.write(f"{prefix}{bm.as_line()}\n")
    logger.info("Mount point configured: %s", bm.as_line())
    return bm
