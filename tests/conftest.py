"""
Pytest configuration and shared fakes for the host capabilities.
"""
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from jellyfin_lxc.errors import CommandError, ContainerError, PackageInstallFailure, WriteFailure
from jellyfin_lxc.lib.command import CmdResult, fmt_argv
from jellyfin_lxc.lib.env import Paths
from jellyfin_lxc.lib.pct import TemplateStore
from jellyfin_lxc.toolkit import Toolkit

TEMPLATE = "debian-12-standard_12.7-1_amd64.tar.zst"


class FakeRunner:
    """Stands in for run_cmd: records argv and answers by argv prefix."""

    def __init__(self, responses: Optional[Dict[Tuple[str, ...], Tuple[int, str]]] = None):
        self.responses = dict(responses or {})
        self.calls: List[List[str]] = []
        self.dry_runs: List[List[str]] = []

    def __call__(self, argv: Sequence[str], *, check: bool = True, dry_run: bool = False, **kwargs) -> CmdResult:
        argv = list(argv)
        self.calls.append(argv)
        if dry_run:
            self.dry_runs.append(argv)
            return CmdResult(argv=argv, returncode=0, stdout="", stderr="")
        rc, out = 0, ""
        for prefix, answer in sorted(self.responses.items(), key=lambda kv: -len(kv[0])):
            if tuple(argv[: len(prefix)]) == prefix:
                rc, out = answer
                break
        if check and rc != 0:
            raise CommandError(argv, rc, "boom", fmt_argv(argv))
        return CmdResult(argv=argv, returncode=rc, stdout=out, stderr="" if rc == 0 else "boom")

    def commands(self, program: str) -> List[List[str]]:
        return [c for c in self.calls if c and c[0] == program]


class FakeDevices:
    def __init__(self, devices: Optional[Dict[str, Tuple[str, str]]] = None):
        self.devices = dict(devices or {})

    def uuid(self, path: str) -> str:
        return self.devices.get(path, ("", ""))[0]

    def fs_type(self, path: str) -> str:
        return self.devices.get(path, ("", ""))[1]


class MemoryMountTable:
    def __init__(self, lines: Optional[List[str]] = None, *, apply_ok: bool = True):
        self.lines = list(lines or [])
        self.apply_ok = apply_ok
        self.applied = 0
        self.rollbacks = 0

    def read_lines(self) -> List[str]:
        return list(self.lines)

    def append(self, line: str) -> int:
        self.lines.append(line)
        return len(self.lines) - 1

    def rollback(self, token: int) -> None:
        self.rollbacks += 1
        del self.lines[token:]

    def apply(self) -> None:
        self.applied += 1
        if not self.apply_ok:
            raise WriteFailure("mount -a failed (32)")


class FakePackages:
    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.installed: List[List[str]] = []

    def install(self, packages: Sequence[str]) -> None:
        if not packages:
            return
        if self.fail:
            raise PackageInstallFailure(packages, "E: Unable to locate package")
        self.installed.append(list(packages))


class FakeRuntime:
    def __init__(self, *, existing=(), running=(), exec_out: Optional[Dict[Tuple[str, ...], str]] = None,
                 fail_exec: Sequence[Tuple[str, ...]] = (), conf_dir: Optional[str] = None):
        self.existing = set(existing)
        self.running = set(running)
        self.exec_out = dict(exec_out or {})
        self.fail_exec = [tuple(f) for f in fail_exec]
        self.conf_dir = conf_dir
        self.created = []
        self.events: List[str] = []
        self.execs: List[Tuple[int, List[str]]] = []

    def exists(self, ct_id: int) -> bool:
        return ct_id in self.existing

    def create(self, spec) -> None:
        self.created.append(spec)
        self.existing.add(spec.ct_id)
        if self.conf_dir:
            with open(f"{self.conf_dir}/{spec.ct_id}.conf", "w", encoding="utf-8") as f:
                f.write(f"hostname: {spec.hostname}\nunprivileged: 1\n")

    def start(self, ct_id: int) -> None:
        self.events.append(f"start {ct_id}")
        self.running.add(ct_id)

    def stop(self, ct_id: int) -> None:
        self.events.append(f"stop {ct_id}")
        self.running.discard(ct_id)

    def is_running(self, ct_id: int) -> bool:
        return ct_id in self.running

    def wait_ready(self, ct_id: int, *, timeout_s: float = 60.0) -> None:
        self.events.append(f"ready {ct_id}")

    def exec(self, ct_id: int, argv: Sequence[str], *, check: bool = True) -> CmdResult:
        argv = list(argv)
        self.execs.append((ct_id, argv))
        self.events.append("exec " + " ".join(argv))
        for prefix in self.fail_exec:
            if tuple(argv[: len(prefix)]) == prefix:
                if check:
                    raise ContainerError(f"pct exec {ct_id} failed (1): boom")
                return CmdResult(argv=argv, returncode=1, stdout="", stderr="boom")
        out = ""
        for prefix, text in self.exec_out.items():
            if tuple(argv[: len(prefix)]) == prefix:
                out = text
        return CmdResult(argv=argv, returncode=0, stdout=out, stderr="")


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def host_paths(tmp_path):
    """Proxmox-looking paths rooted in a temp dir."""
    (tmp_path / "etc/pve/lxc").mkdir(parents=True)
    (tmp_path / "etc/pve/.version").write_text("8.2.4\n")
    return Paths(
        pve_version=str(tmp_path / "etc/pve/.version"),
        fstab=str(tmp_path / "etc/fstab"),
        lxc_conf_dir=str(tmp_path / "etc/pve/lxc"),
        state_default=str(tmp_path / "state.json"),
        log_default=str(tmp_path / "jellyfin-lxc.log"),
    )


@pytest.fixture
def toolkit(host_paths, tmp_path):
    """A Toolkit wired entirely to fakes."""
    fake_runner = FakeRunner({("pveam", "list"): (0, f"local:vztmpl/{TEMPLATE} 126.00MB\n")})
    out_lines: List[str] = []
    tk = Toolkit(
        runner=fake_runner,
        devices=FakeDevices({"/dev/sdb1": ("ABCD-1234", "exfat")}),
        packages=FakePackages(),
        mount_table=MemoryMountTable(),
        runtime=FakeRuntime(
            conf_dir=host_paths.lxc_conf_dir,
            exec_out={("id", "-u"): "992\n", ("id", "-g"): "992\n", ("hostname", "-I"): "192.168.1.50 fd00::5\n"},
        ),
        templates=TemplateStore("local", runner=fake_runner),
        paths=host_paths,
        is_root=lambda: True,
        out=out_lines.append,
    )
    tk.output = out_lines
    return tk


@pytest.fixture
def install_state(tmp_path):
    """Config for a run that mounts into the temp dir."""
    return {
        "config": {
            "ct_id": 111,
            "password": "hunter22",
            "usb_device": "/dev/sdb1",
            "usb_mount": str(tmp_path / "mnt/bjorne"),
            "media_path": "/media/bjorne",
        }
    }
