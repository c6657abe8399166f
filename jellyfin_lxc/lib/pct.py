from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from ..errors import CommandError, ContainerError
from .command import CmdResult, Runner, run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContainerSpec:
    ct_id: int
    hostname: str
    password: str
    template: str  # volume id, e.g. local:vztmpl/debian-12-standard_12.7-1_amd64.tar.zst
    cores: int = 2
    memory_mb: int = 4096
    disk_gb: int = 32
    storage: str = "local-lvm"
    bridge: str = "vmbr0"

    def create_argv(self) -> list[str]:
        return [
            "pct",
            "create",
            str(self.ct_id),
            self.template,
            "--hostname",
            self.hostname,
            "--password",
            self.password,
            "--cores",
            str(self.cores),
            "--memory",
            str(self.memory_mb),
            "--rootfs",
            f"{self.storage}:{self.disk_gb}",
            "--net0",
            f"name=eth0,bridge={self.bridge},ip=dhcp",
            "--features",
            "nesting=1",
            "--unprivileged",
            "1",
            "--onboot",
            "1",
        ]


class ContainerRuntime(Protocol):
    def exists(self, ct_id: int) -> bool:
        ...

    def create(self, spec: ContainerSpec) -> None:
        ...

    def start(self, ct_id: int) -> None:
        ...

    def stop(self, ct_id: int) -> None:
        ...

    def is_running(self, ct_id: int) -> bool:
        ...

    def exec(self, ct_id: int, argv: Sequence[str], *, check: bool = True) -> CmdResult:
        ...

    def wait_ready(self, ct_id: int, *, timeout_s: float = 60.0) -> None:
        ...


class PctRuntime:
    """ContainerRuntime over the Proxmox ``pct`` CLI."""

    def __init__(
        self,
        runner: Runner = run_cmd,
        *,
        dry_run: bool = False,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._run = runner
        self.dry_run = dry_run
        self._sleep = sleep
        self._clock = clock

    def _pct(self, argv: Sequence[str], *, check: bool = True, read_only: bool = False) -> CmdResult:
        try:
            return self._run(["pct", *argv], check=check, dry_run=self.dry_run and not read_only)
        except CommandError as e:
            raise ContainerError(f"pct {' '.join(argv[:2])} failed ({e.returncode}): {e.stderr.strip()}") from e

    def exists(self, ct_id: int) -> bool:
        return self._pct(["status", str(ct_id)], check=False, read_only=True).returncode == 0

    def status(self, ct_id: int) -> str:
        r = self._pct(["status", str(ct_id)], check=False, read_only=True)
        if r.returncode != 0:
            return "missing"
        # "status: running"
        return (r.stdout or "").split(":", 1)[-1].strip() or "unknown"

    def create(self, spec: ContainerSpec) -> None:
        logger.info("Creating LXC container %s", spec.ct_id)
        try:
            self._run(spec.create_argv(), dry_run=self.dry_run, secrets=(spec.password,))
        except CommandError as e:
            raise ContainerError(f"pct create {spec.ct_id} failed ({e.returncode}): {e.stderr.strip()}") from e

    def start(self, ct_id: int) -> None:
        self._pct(["start", str(ct_id)])

    def stop(self, ct_id: int) -> None:
        self._pct(["stop", str(ct_id)])

    def is_running(self, ct_id: int) -> bool:
        return self.status(ct_id) == "running"

    def exec(self, ct_id: int, argv: Sequence[str], *, check: bool = True) -> CmdResult:
        return self._pct(["exec", str(ct_id), "--", *argv], check=check)

    def wait_ready(self, ct_id: int, *, timeout_s: float = 60.0, interval_s: float = 2.0) -> None:
        """Wait until the container runs and answers a trivial exec."""

        if self.dry_run:
            return
        deadline = self._clock() + timeout_s
        while True:
            if self.is_running(ct_id) and self.exec(ct_id, ["true"], check=False).returncode == 0:
                logger.info("Container %s is ready", ct_id)
                return
            if self._clock() >= deadline:
                raise ContainerError(f"Container {ct_id} not ready after {timeout_s:.0f}s")
            self._sleep(interval_s)


class TemplateStore:
    """OS templates managed through ``pveam``."""

    def __init__(self, storage: str = "local", *, runner: Runner = run_cmd, dry_run: bool = False) -> None:
        self.storage = storage
        self._run = runner
        self.dry_run = dry_run

    def volume_id(self, template: str) -> str:
        return f"{self.storage}:vztmpl/{template}"

    def has(self, template: str) -> bool:
        r = self._run(["pveam", "list", self.storage], check=False)
        return r.returncode == 0 and template in (r.stdout or "")

    def ensure_template(self, template: str) -> str:
        self._run(["pveam", "update"], dry_run=self.dry_run)
        if not self.has(template):
            logger.info("Downloading %s", template)
            self._run(["pveam", "download", self.storage, template], dry_run=self.dry_run)
        logger.info("Template ready: %s", self.volume_id(template))
        return self.volume_id(template)
