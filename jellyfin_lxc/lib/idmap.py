from __future__ import annotations

from dataclasses import dataclass

from ..errors import InvalidInput

# Proxmox maps container root (0) to host 100000 for unprivileged containers.
UNPRIVILEGED_OFFSET = 100000


@dataclass(frozen=True)
class IdMapping:
    container_uid: int
    container_gid: int
    host_uid: int
    host_gid: int

    @property
    def host_owner(self) -> str:
        """``uid:gid`` form accepted by chown."""
        return f"{self.host_uid}:{self.host_gid}"


def _check_id(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidInput(f"{name} must be >= 0, got {value}")
    return value


def compute_host_ids(container_uid: int, container_gid: int, offset: int = UNPRIVILEGED_OFFSET) -> IdMapping:
    uid = _check_id("container_uid", container_uid)
    gid = _check_id("container_gid", container_gid)
    off = _check_id("offset", offset)
    return IdMapping(container_uid=uid, container_gid=gid, host_uid=uid + off, host_gid=gid + off)


def parse_id(text: str) -> int:
    """Parse the output of ``id -u`` / ``id -g``."""

    s = (text or "").strip()
    if not s.isdigit():
        raise InvalidInput(f"Expected a numeric id, got {text!r}")
    return int(s)
