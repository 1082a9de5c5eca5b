from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .manifests import PluginUnit, Requirement
from .platforms import PlatformFamily

logger = logging.getLogger(__name__)


def _sudo(argv: List[str], use_sudo: bool) -> List[str]:
    return ["sudo", *argv] if use_sudo else argv


def system_install_commands(
    family: PlatformFamily,
    package_groups: Sequence[Sequence[str]],
    *,
    use_sudo: bool,
) -> List[List[str]]:
    """Build the package-manager invocations for one platform family.

    Each group becomes one install call, the way the groups are laid out
    in the config (toolchain, math libs, audio, git-lfs).
    """

    groups = [list(g) for g in package_groups if g]
    if family is PlatformFamily.DEBIAN:
        cmds = [_sudo(["apt-get", "update"], use_sudo)]
        cmds += [_sudo(["apt-get", "install", "-y", *g], use_sudo) for g in groups]
        return cmds
    if family is PlatformFamily.RHEL:
        return [_sudo(["yum", "install", "-y", *g], use_sudo) for g in groups]
    if family is PlatformFamily.FEDORA:
        return [_sudo(["dnf", "install", "-y", *g], use_sudo) for g in groups]
    if family is PlatformFamily.MACOS:
        # Homebrew refuses to run as root; never prefix sudo.
        flat = [p for g in groups for p in g]
        return [["brew", "install", *flat]] if flat else []
    return []


def manual_install_hint(family: PlatformFamily, package_groups: Sequence[Sequence[str]]) -> str:
    flat = " ".join(p for g in package_groups for p in g)
    return {
        PlatformFamily.DEBIAN: f"sudo apt install {flat}",
        PlatformFamily.RHEL: f"sudo yum install {flat}",
        PlatformFamily.FEDORA: f"sudo dnf install {flat}",
        PlatformFamily.MACOS: f"brew install {flat}",
    }.get(family, flat)


def venv_env(env_dir: str) -> Dict[str, str]:
    """Environment overrides equivalent to activating the venv for uv."""
    return {"VIRTUAL_ENV": env_dir}


def uv_venv_argv(python_version: str, env_dir: str) -> List[str]:
    return ["uv", "venv", "--python", python_version, env_dir]


def uv_pip_install_argv(req: Requirement, *, reinstall: bool = False) -> List[str]:
    argv = ["uv", "pip", "install", req.spec]
    if req.index_url:
        argv += ["--index-url", req.index_url]
    if reinstall:
        argv.append("--reinstall")
    return argv


def uv_pip_install_editable_argv(path: str) -> List[str]:
    return ["uv", "pip", "install", "-e", path]


def cargo_install_argv(crate: str, version: str, *, force: bool = False) -> List[str]:
    argv = ["cargo", "install", crate, "--version", version, "--locked"]
    if force:
        argv.append("--force")
    return argv


def cargo_build_argv(unit: PluginUnit, manifest_path: str) -> List[str]:
    argv = ["cargo", "build", "--release", "--manifest-path", manifest_path]
    if unit.package:
        argv += ["-p", unit.package]
    return argv


def nltk_download_argv(python: str, corpora: Sequence[str]) -> Optional[List[str]]:
    if not corpora:
        return None
    calls = "; ".join(f"nltk.download({c!r}, quiet=True)" for c in corpora)
    return [python, "-c", f"import nltk; {calls}"]
