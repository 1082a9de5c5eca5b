from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.fs import remove_tree
from ..lib.pkg import uv_venv_argv
from ..logging_utils import success
from ..pipeline import Stage, StepResult

logger = logging.getLogger(__name__)


class CreateEnvironmentStep:
    step_id = "30_create_environment"
    reaches = Stage.ENVIRONMENT_READY

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepResult:
        env_dir = ctx.cfg.env_dir
        decisions = state.setdefault("execution", {}).setdefault("decisions", {})

        if env_dir.exists():
            logger.warning("Virtual environment already exists at %s", env_dir)
            if not ctx.confirm("Do you want to remove and recreate it?"):
                logger.info("Using existing environment")
                decisions["environment"] = "reused"
                return StepResult.ok()
            logger.info("Removing existing environment...")
            remove_tree(env_dir, dry_run=ctx.dry_run)

        logger.info("Creating virtual environment %s with Python %s...", ctx.cfg.env_name, ctx.cfg.python_version)
        ctx.run(uv_venv_argv(ctx.cfg.python_version, str(env_dir)), cwd=str(ctx.cfg.project_root))
        decisions["environment"] = "created"
        success(logger, "Environment created at %s", env_dir)
        return StepResult.ok()
