from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .errors import InvalidInput

PASSWORD_ENV = "JELLYFIN_LXC_PASSWORD"
MIN_CT_ID = 100
MIN_PASSWORD_LEN = 6

DEFAULTS: Dict[str, Any] = {
    "ct_id": 111,
    "hostname": "jellyfin",
    "password": "",
    "cores": 2,
    "memory_mb": 4096,
    "disk_gb": 32,
    "storage": "local-lvm",
    "bridge": "vmbr0",
    "usb_device": "/dev/sdb1",
    "usb_mount": "/mnt/bjorne",
    "media_path": "/media/bjorne",
    "template": "debian-12-standard_12.7-1_amd64.tar.zst",
    "template_storage": "local",
    "ready_timeout_s": 60,
    "dry_run": False,
}


def _int(raw: Dict[str, Any], key: str) -> int:
    value = raw.get(key, DEFAULTS[key])
    if isinstance(value, bool):
        raise InvalidInput(f"{key} must be an integer, got {value!r}")
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise InvalidInput(f"{key} must be an integer, got {value!r}") from e


def _str(raw: Dict[str, Any], key: str) -> str:
    value = raw.get(key)
    return str(value).strip() if value not in (None, "") else str(DEFAULTS[key])


@dataclass(frozen=True)
class InstallConfig:
    """Typed view over ``state["config"]``."""

    raw: Dict[str, Any]

    @property
    def ct_id(self) -> int:
        return _int(self.raw, "ct_id")

    @property
    def hostname(self) -> str:
        return _str(self.raw, "hostname")

    @property
    def password(self) -> str:
        return str(self.raw.get("password") or os.environ.get(PASSWORD_ENV) or "")

    @property
    def cores(self) -> int:
        return _int(self.raw, "cores")

    @property
    def memory_mb(self) -> int:
        return _int(self.raw, "memory_mb")

    @property
    def disk_gb(self) -> int:
        return _int(self.raw, "disk_gb")

    @property
    def storage(self) -> str:
        return _str(self.raw, "storage")

    @property
    def bridge(self) -> str:
        return _str(self.raw, "bridge")

    @property
    def usb_device(self) -> str:
        return _str(self.raw, "usb_device")

    @property
    def usb_mount(self) -> str:
        return _str(self.raw, "usb_mount")

    @property
    def media_path(self) -> str:
        return _str(self.raw, "media_path")

    @property
    def template(self) -> str:
        return _str(self.raw, "template")

    @property
    def template_storage(self) -> str:
        return _str(self.raw, "template_storage")

    @property
    def ready_timeout_s(self) -> int:
        return _int(self.raw, "ready_timeout_s")

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))

    def validate(self) -> None:
        """Checks the original prompts enforced, now applied to parameters."""

        if self.ct_id < MIN_CT_ID:
            raise InvalidInput(f"Invalid Container ID {self.ct_id} (must be >= {MIN_CT_ID})")
        if len(self.password) < MIN_PASSWORD_LEN:
            raise InvalidInput(
                f"Password must be at least {MIN_PASSWORD_LEN} characters "
                f"(set config.password or {PASSWORD_ENV})"
            )
        for key in ("cores", "memory_mb", "disk_gb"):
            if _int(self.raw, key) <= 0:
                raise InvalidInput(f"{key} must be positive")
        for key in ("usb_mount", "media_path"):
            if not _str(self.raw, key).startswith("/"):
                raise InvalidInput(f"{key} must be an absolute path")


def load_config_file(path: str) -> Dict[str, Any]:
    """Read a YAML (or JSON, which YAML accepts) settings file."""

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the config file") from e

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise InvalidInput(f"{path}: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping/object")
    unknown = sorted(set(raw) - set(DEFAULTS))
    if unknown:
        raise InvalidInput(f"Unknown config keys in {path}: {', '.join(unknown)}")
    return raw
