from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..context import ProvisionCtx
from ..errors import ProvisionError
from ..lib.pkg import nltk_download_argv, uv_pip_install_argv, venv_env
from ..logging_utils import success
from ..pipeline import Stage, StepResult

logger = logging.getLogger(__name__)


class InstallDependenciesStep:
    step_id = "40_install_dependencies"
    reaches = Stage.DEPENDENCIES_INSTALLED

    def _install_pinned(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> None:
        env = venv_env(str(ctx.cfg.env_dir))
        installed: List[str] = []
        skipped: List[str] = []
        for req in ctx.cfg.requirements:
            if not ctx.platform.matches(req.platforms):
                logger.debug("Skipping %s (platforms=%s)", req.name, ",".join(req.platforms or []))
                skipped.append(req.name)
                continue
            ctx.run(uv_pip_install_argv(req), env=env)
            installed.append(req.spec)

        plan = state.setdefault("execution", {}).setdefault("plan", {})
        plan["dependencies"] = installed
        plan["dependencies_skipped"] = skipped

    def _install_sync(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> None:
        root = ctx.cfg.project_root
        if not (root / "pyproject.toml").exists():
            raise ProvisionError(
                f"pyproject.toml not found in {root}",
                hint="Sync mode installs from the project's pyproject.toml; run from the project root or pass --project-root.",
            )
        logger.info("Installing dependencies from pyproject.toml...")
        # uv sync ignores VIRTUAL_ENV and targets <root>/.venv unless told otherwise.
        env = dict(venv_env(str(ctx.cfg.env_dir)), UV_PROJECT_ENVIRONMENT=str(ctx.cfg.env_dir))
        ctx.run(["uv", "sync"], cwd=str(root), env=env)
        state.setdefault("execution", {}).setdefault("plan", {})["dependencies"] = ["uv sync"]
        if ctx.platform.is_macos:
            logger.info("MLX audio backend is not synced automatically; install it with: uv pip install mlx-audio")

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepResult:
        env_dir = ctx.cfg.env_dir
        if not env_dir.exists() and not ctx.dry_run:
            raise ProvisionError(f"Environment missing at {env_dir}")

        if ctx.cfg.install_mode == "sync":
            self._install_sync(ctx, state)
        else:
            self._install_pinned(ctx, state)

        argv = nltk_download_argv(str(ctx.cfg.env_python), ctx.cfg.nltk_corpora)
        if argv:
            logger.info("Downloading NLTK data for text processing...")
            ctx.run(argv, env=venv_env(str(env_dir)))

        success(logger, "Core dependencies installed")
        return StepResult.ok()
