from __future__ import annotations

from typing import Sequence


class ProvisioningError(RuntimeError):
    """Base for failures that abort a provisioning run."""


class DeviceNotFound(ProvisioningError):
    def __init__(self, device: str) -> None:
        super().__init__(f"Could not find USB device {device} (blkid returned no UUID)")
        self.device = device


class WriteFailure(ProvisioningError):
    """The mount table could not be applied after an edit."""


class InvalidInput(ProvisioningError, ValueError):
    pass


class PackageInstallFailure(ProvisioningError):
    def __init__(self, packages: Sequence[str], reason: str) -> None:
        super().__init__(f"Failed to install {' '.join(packages)}: {reason}")
        self.packages = list(packages)


class ContainerError(ProvisioningError):
    pass


class CommandError(ProvisioningError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str, cmdline: str) -> None:
        super().__init__(f"Command failed ({returncode}): {cmdline}\n{stderr}")
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
