from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import ProvisionCtx
from ..errors import ProvisionError
from ..lib.tools import probe_tool
from ..logging_utils import success
from ..pipeline import Stage, StepResult

logger = logging.getLogger(__name__)

UV_INSTALL_HINT = """\
uv is required. Choose ONE of the following options, then run again:
  A) pip install uv
  B) curl -LsSf https://astral.sh/uv/install.sh | sh
  C) brew install uv"""

MANDATORY_TOOLS = {
    "uv": UV_INSTALL_HINT,
    "python3": "Install Python 3.12 or later.",
    "git": "Install git with your system package manager.",
}
OPTIONAL_TOOLS = {
    "cargo": "Install Rust from https://rustup.rs/ to build Rust nodes and the Dora CLI.",
}


class CheckPrerequisitesStep:
    step_id = "10_check_prerequisites"
    reaches = Stage.PREREQUISITES_CHECKED

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepResult:
        tools = state.setdefault("execution", {}).setdefault("tools", {})

        for name, hint in MANDATORY_TOOLS.items():
            status = probe_tool(name, which=ctx.which, runner=ctx.run)
            tools[name] = status.as_dict()
            if not status.present:
                raise ProvisionError(f"{name} not found on PATH", hint=hint)
            success(logger, "%s found: %s", name, status.version or status.path)

        warnings: list[str] = []
        for name, hint in OPTIONAL_TOOLS.items():
            status = probe_tool(name, which=ctx.which, runner=ctx.run)
            tools[name] = status.as_dict()
            if status.present:
                success(logger, "%s found: %s", name, status.version or status.path)
            else:
                logger.warning("%s not found; dependent steps will be skipped. %s", name, hint)
                warnings.append(f"{name} not found")

        return StepResult.from_warnings(warnings)


def cargo_available(state: Dict[str, Any]) -> bool:
    tools = (state.get("execution") or {}).get("tools") or {}
    return bool((tools.get("cargo") or {}).get("present"))
