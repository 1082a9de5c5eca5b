from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.pkg import manual_install_hint, system_install_commands
from ..lib.platforms import PlatformFamily
from ..logging_utils import success
from ..pipeline import Stage, StepResult

logger = logging.getLogger(__name__)

_KNOWN_FAMILIES = (PlatformFamily.MACOS, PlatformFamily.DEBIAN, PlatformFamily.RHEL, PlatformFamily.FEDORA)


class InstallSystemPackagesStep:
    step_id = "20_system_packages"
    reaches = Stage.SYSTEM_PACKAGES_INSTALLED

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepResult:
        family = ctx.platform.family
        groups = ctx.cfg.system_packages(family)
        decisions = state.setdefault("execution", {}).setdefault("decisions", {})
        decisions["system_packages_branch"] = family.value

        if family is PlatformFamily.UNKNOWN:
            logger.warning("Package manager not detected. Please install dependencies manually:")
            for fam in _KNOWN_FAMILIES:
                logger.info("  %s: %s", fam.value, manual_install_hint(fam, ctx.cfg.system_packages(fam)))
            return StepResult.warning("unknown platform; system packages not installed")

        if family is PlatformFamily.MACOS and not ctx.which("brew"):
            hint = manual_install_hint(family, groups)
            logger.warning("Homebrew not found. Install it from https://brew.sh/ then run: %s", hint)
            return StepResult.warning("Homebrew not found; system packages not installed")

        use_sudo = ctx.cfg.use_sudo and family is not PlatformFamily.MACOS
        for argv in system_install_commands(family, groups, use_sudo=use_sudo):
            ctx.run(argv)

        success(logger, "System dependencies installed (%s)", family.value)
        return StepResult.ok()
