from __future__ import annotations

import logging
from typing import Protocol, Sequence

from ..errors import CommandError, PackageInstallFailure
from .command import Runner, run_cmd

logger = logging.getLogger(__name__)


class PackageInstaller(Protocol):
    def install(self, packages: Sequence[str]) -> None:
        ...


def apt_is_installed(package: str, *, runner: Runner = run_cmd) -> bool:
    """Return True if dpkg reports the package as installed on the host."""

    r = runner(["dpkg-query", "-W", "-f=${Status}", package], check=False)
    return r.returncode == 0 and "install ok installed" in (r.stdout or "")


class AptInstaller:
    """Host-side apt installer.

    Packages dpkg already reports as installed are skipped; apt's own
    "already the newest version" path also exits 0, so reruns are harmless.
    """

    def __init__(self, runner: Runner = run_cmd, *, dry_run: bool = False) -> None:
        self._run = runner
        self.dry_run = dry_run

    def install(self, packages: Sequence[str]) -> None:
        if not packages:
            return
        missing = [p for p in packages if not apt_is_installed(p, runner=self._run)]
        if not missing:
            logger.info("Packages already installed: %s", " ".join(packages))
            return

        try:
            self._run(["apt-get", "update"], dry_run=self.dry_run)
            self._run(
                ["apt-get", "install", "-y", *missing],
                env={"DEBIAN_FRONTEND": "noninteractive"},
                dry_run=self.dry_run,
            )
        except CommandError as e:
            raise PackageInstallFailure(missing, e.stderr.strip() or f"exit {e.returncode}") from e
        logger.info("Installed packages: %s", " ".join(missing))
