from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..context import ProvisionCtx
from ..errors import CommandError, ProvisionError
from ..lib.manifests import PluginUnit
from ..lib.pkg import cargo_build_argv, uv_pip_install_editable_argv, venv_env
from ..logging_utils import success
from ..pipeline import Stage, StepResult
from .step_10_check_prerequisites import cargo_available

logger = logging.getLogger(__name__)


class BuildPluginsStep:
    """Install Python nodes (editable) and build Rust nodes in release mode.

    Units whose directory is absent are skipped with a warning. A unit is
    recorded as built only after its build command succeeded.
    """

    step_id = "60_build_plugins"
    reaches = Stage.PLUGINS_BUILT

    def _build(self, ctx: ProvisionCtx, unit: PluginUnit) -> None:
        unit_dir = ctx.cfg.plugin_dir(unit)
        if unit.kind == "python":
            ctx.run(uv_pip_install_editable_argv(str(unit_dir)), env=venv_env(str(ctx.cfg.env_dir)))
        else:
            ctx.run(cargo_build_argv(unit, str(unit_dir / "Cargo.toml")), cwd=str(unit_dir))

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepResult:
        record = state.setdefault("execution", {}).setdefault("plugins", {})
        have_cargo = cargo_available(state)
        warnings: List[str] = []

        for unit in ctx.cfg.plugin_units:
            unit_dir = ctx.cfg.plugin_dir(unit)
            if not unit_dir.is_dir():
                logger.warning("%s not found at %s", unit.name, unit_dir)
                record[unit.name] = "absent"
                warnings.append(f"{unit.name} not found")
                continue
            if unit.kind == "rust" and not have_cargo:
                logger.warning("Skipping Rust node %s (cargo not found)", unit.name)
                record[unit.name] = "skipped"
                warnings.append(f"{unit.name} skipped (cargo missing)")
                continue

            logger.info("%s %s...", "Installing" if unit.kind == "python" else "Building", unit.name)
            try:
                self._build(ctx, unit)
            except CommandError as e:
                record[unit.name] = "failed"
                if ctx.cfg.fail_on_build_error and not unit.optional:
                    raise ProvisionError(f"{unit.name} failed to build", hint=e.hint) from e
                logger.error("%s failed to build (exit %s); continuing", unit.name, e.returncode)
                warnings.append(f"{unit.name} failed to build")
                continue

            record[unit.name] = "built"
            success(logger, "%s %s", unit.name, "installed" if unit.kind == "python" else "built")

        return StepResult.from_warnings(warnings)
