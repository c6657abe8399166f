from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict

from .install_config import DEFAULTS

logger = logging.getLogger(__name__)

STATE_VERSION = 1

# Never written to disk.
_RUN_ONLY_KEYS = ("password", "dry_run")


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def _yaml():
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("YAML state requested but PyYAML is not available. Use JSON state instead.") from e
    return yaml


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    if _detect_format(p) in {"yaml", "yml"}:
        data = _yaml().safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        data = json.loads(p.read_text(encoding="utf-8"))

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def _redacted(state: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(state)
    cfg = out.get("config") or {}
    for key in _RUN_ONLY_KEYS:
        cfg.pop(key, None)
    return out


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    data = _redacted(state)
    if _detect_format(p) in {"yaml", "yml"}:
        p.write_text(_yaml().safe_dump(data, sort_keys=False) + "\n", encoding="utf-8")
    else:
        p.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with defaults (without overriding user values)."""

    state.setdefault("version", STATE_VERSION)
    state.setdefault("config", {})
    state.setdefault("execution", {})

    cfg = state["config"]
    for key, value in DEFAULTS.items():
        cfg.setdefault(key, value)

    exe = state["execution"]
    exe.setdefault("current_step", None)
    exe.setdefault("completed_steps", [])
    exe.setdefault("errors", [])

    return state


def merge_config(state: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Apply explicit settings (config file, CLI flags) over stored ones."""

    cfg = state.setdefault("config", {})
    for key, value in overrides.items():
        if value is not None:
            cfg[key] = value
    return state


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def is_step_completed(state: Dict[str, Any], step_id: str) -> bool:
    exe = state.get("execution") or {}
    completed = exe.get("completed_steps") or []
    return step_id in completed


def record_decision(state: Dict[str, Any], key: str, value: Any) -> None:
    state.setdefault("execution", {}).setdefault("decisions", {})[key] = value
