from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..context import ProvisionCtx
from ..lib.fs import force_symlink
from ..lib.pkg import cargo_install_argv
from ..lib.tools import extract_semver
from ..logging_utils import success
from ..pipeline import Stage, StepResult
from .step_10_check_prerequisites import cargo_available

logger = logging.getLogger(__name__)


class InstallDoraCliStep:
    step_id = "50_install_dora_cli"
    reaches = Stage.CLI_INSTALLED

    def _installed_version(self, ctx: ProvisionCtx, binary: str) -> Optional[str]:
        r = ctx.run([binary, "--version"], check=False, capture=True)
        if r.returncode != 0:
            return None
        return extract_semver(r.stdout or r.stderr)

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepResult:
        decisions = state.setdefault("execution", {}).setdefault("decisions", {})

        if not cargo_available(state):
            logger.warning("Cargo not found. Cannot install %s; using dora from the pip install instead", ctx.cfg.dora_crate)
            decisions["dora_cli"] = "skipped"
            return StepResult.warning("dora CLI not installed (cargo missing)")

        wanted = ctx.cfg.dora_version
        force = False
        existing = ctx.which("dora")
        if existing:
            current = self._installed_version(ctx, existing)
            logger.info("Dora CLI already installed (version: %s)", current or "unknown")
            if current == wanted and not ctx.confirm("Do you want to reinstall/update Dora CLI?"):
                decisions["dora_cli"] = "kept"
                # The kept binary need not live under ~/.cargo/bin.
                binary = ctx.cargo_dora if ctx.cargo_dora.exists() else Path(existing)
                success(logger, "Keeping Dora CLI %s at %s", current, binary)
                return self._link_into_env(ctx, binary, decisions)
            force = True

        logger.info("Installing %s v%s via cargo...", ctx.cfg.dora_crate, wanted)
        ctx.run(cargo_install_argv(ctx.cfg.dora_crate, wanted, force=force))
        decisions["dora_cli"] = "installed"
        return self._link(ctx, decisions)

    def _link(self, ctx: ProvisionCtx, decisions: Dict[str, Any]) -> StepResult:
        binary = ctx.cargo_dora
        wanted = ctx.cfg.dora_version

        if not ctx.dry_run:
            if not binary.exists():
                logger.warning("Dora CLI installation failed: %s missing", binary)
                return StepResult.warning(f"{binary} missing after install")
            version = self._installed_version(ctx, str(binary))
            if version != wanted:
                logger.warning("Dora CLI installed but version is %s (expected %s)", version, wanted)
                return StepResult.warning(f"dora CLI version {version} != {wanted}")

        success(logger, "Dora CLI version %s installed", wanted)
        return self._link_into_env(ctx, binary, decisions)

    def _link_into_env(self, ctx: ProvisionCtx, binary: Path, decisions: Dict[str, Any]) -> StepResult:
        if ctx.cfg.dora_link_into_env:
            link = ctx.cfg.env_dir / "bin" / "dora"
            force_symlink(binary, link, dry_run=ctx.dry_run)
            decisions["dora_cli_link"] = str(link)
            success(logger, "Linked %s into the environment", link)
        return StepResult.ok()
