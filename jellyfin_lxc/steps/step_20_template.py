from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..toolkit import Toolkit

logger = logging.getLogger(__name__)


class DownloadTemplateStep:
    step_id = "20_template"
    title = "Download OS template"

    def __init__(self, tk: Toolkit) -> None:
        self.tk = tk

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = InstallConfig(state.get("config") or {})
        volume = self.tk.templates.ensure_template(cfg.template)
        state.setdefault("execution", {})["template_volume"] = volume
        return state
