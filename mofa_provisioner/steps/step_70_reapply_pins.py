from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.pkg import uv_pip_install_argv, venv_env
from ..logging_utils import success
from ..pipeline import Stage, StepResult

logger = logging.getLogger(__name__)


class ReapplyPinsStep:
    step_id = "70_reapply_pins"
    reaches = Stage.PINS_REAPPLIED

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepResult:
        # uv sync owns the lock file; reinstalling over it would fight it.
        if ctx.cfg.install_mode == "sync" or not ctx.cfg.repin:
            return StepResult.ok()

        env = venv_env(str(ctx.cfg.env_dir))
        for req in ctx.cfg.repin:
            logger.info("Ensuring %s is installed...", req.spec)
            ctx.run(uv_pip_install_argv(req, reinstall=True), env=env)

        success(logger, "Core pins reapplied")
        return StepResult.ok()
