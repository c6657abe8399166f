from .step_10_preflight import PreflightStep
from .step_20_template import DownloadTemplateStep
from .step_30_create_container import CreateContainerStep
from .step_40_usb_mount import UsbMountStep
from .step_45_container_mount import ContainerMountStep
from .step_50_install_jellyfin import InstallJellyfinStep
from .step_60_fix_permissions import FixPermissionsStep
from .step_90_report import ReportStep

__all__ = [
    "PreflightStep",
    "DownloadTemplateStep",
    "CreateContainerStep",
    "UsbMountStep",
    "ContainerMountStep",
    "InstallJellyfinStep",
    "FixPermissionsStep",
    "ReportStep",
]
