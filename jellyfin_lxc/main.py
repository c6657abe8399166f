from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, List, Optional

from .drive import connect, disconnect
from .install_config import InstallConfig, load_config_file
from .lib.env import PATHS
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import Step, run_pipeline
from .state_store import ensure_defaults, load_state, merge_config, save_state
from .steps import (
    ContainerMountStep,
    CreateContainerStep,
    DownloadTemplateStep,
    FixPermissionsStep,
    InstallJellyfinStep,
    PreflightStep,
    ReportStep,
    UsbMountStep,
)
from .toolkit import Toolkit, host_toolkit
from .update import update_jellyfin

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = PATHS.state_default


def build_steps(tk: Toolkit) -> List[Step]:
    return [
        PreflightStep(tk),
        DownloadTemplateStep(tk),
        CreateContainerStep(tk),
        UsbMountStep(tk),
        ContainerMountStep(tk),
        InstallJellyfinStep(tk),
        FixPermissionsStep(tk),
        ReportStep(tk),
    ]


def run_install(
    *,
    state_path: str = DEFAULT_STATE_PATH,
    overrides: Optional[Dict[str, Any]] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
    tk: Optional[Toolkit] = None,
) -> Dict[str, Any]:
    """Run the provisioning pipeline, persisting state for resume.

    Dry runs leave the state file untouched so a later real run starts fresh.
    """

    state = ensure_defaults(load_state(state_path))
    merge_config(state, overrides or {})
    cfg = InstallConfig(state["config"])

    if tk is None:
        tk = host_toolkit(dry_run=cfg.dry_run, template_storage=cfg.template_storage)

    try:
        result = run_pipeline(
            state=state,
            steps=build_steps(tk),
            start_at=start_at,
            stop_after=stop_after,
            force=force,
        )
        state = result.state
        state.setdefault("execution", {})["summary"] = {
            "ran_steps": result.ran_steps,
            "skipped_steps": result.skipped_steps,
        }
        return state
    except Exception as e:
        step_id = (state.get("execution") or {}).get("current_step")
        logger.exception("Step %s failed", step_id)
        state.setdefault("execution", {}).setdefault("errors", []).append(
            {
                "step": step_id,
                "error": str(e),
            }
        )
        raise
    finally:
        if cfg.dry_run:
            logger.info("Dry run: state not saved to %s", state_path)
        else:
            save_state(state_path, state)


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if getattr(args, "config", None):
        out.update(load_config_file(args.config))
    for key in ("ct_id", "usb_device", "usb_mount", "media_path"):
        value = getattr(args, key, None)
        if value is not None:
            out[key] = value
    # Per-run only; never inherited from a saved state.
    out["dry_run"] = bool(getattr(args, "dry_run", False) or out.get("dry_run", False))
    return out


def _settings(args: argparse.Namespace) -> InstallConfig:
    """Settings for the update/drive commands: stored state, then file, then flags."""

    state = ensure_defaults(load_state(args.state))
    merge_config(state, _overrides(args))
    return InstallConfig(state["config"])


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="jellyfin-lxc", description="Jellyfin in an unprivileged Proxmox LXC container")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to installer state (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to log file")
    p.add_argument("--config", default=None, help="YAML settings file")
    p.add_argument("--ct-id", dest="ct_id", type=int, default=None, help="Container ID")
    p.add_argument("--usb-mount", dest="usb_mount", default=None, help="Host mount point of the media drive")
    p.add_argument("--dry-run", action="store_true", help="Log mutating commands instead of running them")
    p.add_argument("-v", "--verbose", action="store_true", help="Log command output")

    sub = p.add_subparsers(dest="command", required=True)

    inst = sub.add_parser("install", help="Create the container, mount the drive and install Jellyfin")
    inst.add_argument("--usb-device", dest="usb_device", default=None, help="USB partition, e.g. /dev/sdb1")
    inst.add_argument("--media-path", dest="media_path", default=None, help="Media path inside the container")
    inst.add_argument("--start-at", default=None, help="Start at step_id (e.g. 40_usb_mount)")
    inst.add_argument("--stop-after", default=None, help="Stop after step_id")
    inst.add_argument("--force", action="store_true", help="Re-run steps even if marked completed")

    sub.add_parser("update", help="Upgrade Jellyfin inside the container")

    drv = sub.add_parser("drive", help="Safely connect or disconnect the media drive")
    drv.add_argument("action", choices=["connect", "disconnect"])

    return p


def main(argv: Optional[list[str]] = None, *, tk: Optional[Toolkit] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        if args.command == "install":
            run_install(
                state_path=args.state,
                overrides=_overrides(args),
                start_at=args.start_at,
                stop_after=args.stop_after,
                force=args.force,
                tk=tk,
            )
            return 0

        cfg = _settings(args)
        tk = tk or host_toolkit(dry_run=cfg.dry_run, template_storage=cfg.template_storage)

        if args.command == "update":
            status = update_jellyfin(tk.runtime, cfg.ct_id)
            tk.out(status.rstrip())
            tk.out("Jellyfin update complete!")
            return 0

        if args.action == "disconnect":
            disconnect(tk.runtime, cfg.ct_id, cfg.usb_mount, runner=tk.runner, dry_run=cfg.dry_run)
            tk.out("Safe to remove drive!")
            return 0
        if connect(tk.runtime, cfg.ct_id, cfg.usb_mount, runner=tk.runner, dry_run=cfg.dry_run):
            tk.out("Ready! Scan libraries in Jellyfin.")
            return 0
        tk.out("Mount failed! Check if drive is connected.")
        return 1
    except (RuntimeError, OSError, ValueError) as e:
        logger.error("Aborted: %s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
