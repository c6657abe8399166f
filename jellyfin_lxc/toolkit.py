from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from .lib.block import BlkidDeviceQuery, DeviceQuery
from .lib.command import Runner, run_cmd
from .lib.env import PATHS, Paths
from .lib.fstab import FstabFile, MountTableWriter
from .lib.host import is_root
from .lib.pct import ContainerRuntime, PctRuntime, TemplateStore
from .lib.pkg import AptInstaller, PackageInstaller


@dataclass
class Toolkit:
    """The host capabilities steps work through; tests swap in fakes."""

    runner: Runner
    devices: DeviceQuery
    packages: PackageInstaller
    mount_table: MountTableWriter
    runtime: ContainerRuntime
    templates: TemplateStore
    paths: Paths = PATHS
    is_root: Callable[[], bool] = is_root
    out: Callable[[str], None] = field(default=print)


def host_toolkit(*, dry_run: bool = False, template_storage: str = "local", paths: Paths = PATHS) -> Toolkit:
    return Toolkit(
        runner=run_cmd,
        devices=BlkidDeviceQuery(run_cmd),
        packages=AptInstaller(run_cmd, dry_run=dry_run),
        mount_table=FstabFile(paths.fstab, runner=run_cmd, dry_run=dry_run),
        runtime=PctRuntime(run_cmd, dry_run=dry_run),
        templates=TemplateStore(template_storage, runner=run_cmd, dry_run=dry_run),
        paths=paths,
    )
