from __future__ import annotations

import argparse
import logging
import shutil
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

import yaml

from .config import load_provision_config
from .context import ProvisionCtx
from .lib.command import CmdResult, run_cmd
from .lib.manifests import check_consistency
from .lib.platforms import detect_platform
from .lib.prompt import Prompter, make_prompter
from .logging_utils import configure_logging, success
from .pipeline import PipelineResult, Step, run_pipeline
from .state_store import ensure_defaults, load_state, save_state
from .steps import (
    BuildPluginsStep,
    CheckPrerequisitesStep,
    CreateEnvironmentStep,
    InstallDependenciesStep,
    InstallDoraCliStep,
    InstallSystemPackagesStep,
    ReapplyPinsStep,
    SummaryStep,
)

logger = logging.getLogger(__name__)


STATE_DIR = ".mofa-provision"


def build_steps() -> list[Step]:
    return [
        CheckPrerequisitesStep(),
        InstallSystemPackagesStep(),
        CreateEnvironmentStep(),
        InstallDependenciesStep(),
        InstallDoraCliStep(),
        BuildPluginsStep(),
        ReapplyPinsStep(),
        SummaryStep(),
    ]


def run(
    *,
    config_path: Optional[str] = None,
    project_root: Optional[str] = None,
    state_path: Optional[str] = None,
    log_path: Optional[str] = None,
    assume: Optional[bool] = None,
    dry_run: bool = False,
    confirm: Optional[Prompter] = None,
    runner: Callable[..., CmdResult] = run_cmd,
    which: Callable[[str], Optional[str]] = shutil.which,
    environ: Optional[Dict[str, str]] = None,
    home: Optional[Path] = None,
) -> PipelineResult:
    """Run the provisioning pipeline and persist the run record."""

    root = Path(project_root or Path.cwd()).expanduser().absolute()
    actual_log_path = configure_logging(log_path=log_path or str(root / STATE_DIR / "provision.log"))

    try:
        cfg = load_provision_config(config_path, project_root=str(root))
    except (OSError, ValueError) as e:
        logger.error("Cannot load provisioning config: %s", e)
        raise
    state_file = state_path or str(cfg.project_root / STATE_DIR / "state.json")

    logger.info("Dora Voice Chat - Isolated Environment Setup")
    logger.info("Project root: %s", cfg.project_root)
    logger.info("Environment directory: %s", cfg.env_dir)

    for problem in check_consistency(cfg.raw):
        logger.warning("Config drift: %s", problem)

    ctx = ProvisionCtx(
        cfg=cfg,
        platform=detect_platform(environ=environ, which=which),
        confirm=confirm or make_prompter(assume=assume),
        dry_run=dry_run,
        runner=runner,
        which=which,
        home=home or Path.home(),
    )

    try:
        previous = load_state(state_file)
    except (ValueError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable run record %s (%s); starting a fresh one", state_file, e)
        previous = {}
    state: Dict[str, Any] = ensure_defaults(previous)
    exe = state["execution"]
    exe["log_path"] = actual_log_path
    exe["platform"] = {"family": ctx.platform.family.value, "arch": ctx.platform.arch}
    exe["dry_run"] = dry_run

    try:
        result = run_pipeline(ctx=ctx, state=state, steps=build_steps())
    except Exception as e:
        logger.exception("Provisioning failed")
        exe.setdefault("errors", []).append({"step": exe.get("current_step"), "error": str(e)})
        raise
    finally:
        save_state(state_file, state)

    if result.succeeded:
        success(logger, "Setup completed successfully!")
    return result


def main(argv: Optional[Sequence[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="mofa-provision", description="Provision the Dora voice-chat environment.")
    p.add_argument("--config", default=None, help="YAML overrides merged over the shipped defaults")
    p.add_argument("--project-root", default=None, help="Project root (default: current directory)")
    p.add_argument("--state", default=None, help="Path to run record (json|yaml)")
    p.add_argument("--log", default=None, help="Path to provisioning log")
    answer = p.add_mutually_exclusive_group()
    answer.add_argument("--yes", dest="assume", action="store_const", const=True, help="Answer yes to every prompt")
    answer.add_argument("--no", dest="assume", action="store_const", const=False, help="Answer no to every prompt")
    p.add_argument("--dry-run", action="store_true", help="Log commands without executing them")

    args = p.parse_args(argv)

    try:
        result = run(
            config_path=args.config,
            project_root=args.project_root,
            state_path=args.state,
            log_path=args.log,
            assume=args.assume,
            dry_run=bool(args.dry_run),
        )
    except Exception:
        logger.exception("mofa-provision aborted")
        return 1
    return 0 if result.succeeded else 1


if __name__ == "__main__":
    raise SystemExit(main())
