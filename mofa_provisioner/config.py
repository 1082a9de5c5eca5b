from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .lib.manifests import PluginUnit, Requirement, load_default_manifest, load_yaml
from .lib.platforms import PlatformFamily

INSTALL_MODES = ("pinned", "sync")


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


@dataclass(frozen=True)
class ProvisionConfig:
    raw: Dict[str, Any]
    project_root: Path

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    @property
    def env_name(self) -> str:
        return str(self._section("environment").get("name") or "mofa-studio")

    @property
    def env_dir(self) -> Path:
        rel = str(self._section("environment").get("path") or ".venv")
        return (self.project_root / rel).absolute()

    @property
    def env_python(self) -> Path:
        return self.env_dir / "bin" / "python"

    @property
    def python_version(self) -> str:
        return str(self._section("environment").get("python_version") or "3.12")

    @property
    def install_mode(self) -> str:
        return str(self._section("dependencies").get("mode") or "pinned").lower()

    @property
    def requirements(self) -> List[Requirement]:
        return [Requirement.parse(e) for e in self._section("dependencies").get("packages") or []]

    @property
    def repin(self) -> List[Requirement]:
        return [Requirement.parse(e) for e in self._section("dependencies").get("repin") or []]

    @property
    def nltk_corpora(self) -> List[str]:
        return [str(c) for c in self._section("dependencies").get("nltk_corpora") or []]

    def system_packages(self, family: PlatformFamily) -> List[List[str]]:
        groups = self._section("system_packages").get(family.value) or []
        return [[str(p) for p in g] for g in groups]

    @property
    def use_sudo(self) -> bool:
        setting = self.raw.get("sudo", "auto")
        if isinstance(setting, bool):
            return setting
        return hasattr(os, "geteuid") and os.geteuid() != 0

    @property
    def dora_crate(self) -> str:
        return str(self._section("dora_cli").get("crate") or "dora-cli")

    @property
    def dora_version(self) -> str:
        return str(self._section("dora_cli").get("version") or "0.3.12")

    @property
    def dora_link_into_env(self) -> bool:
        return bool(self._section("dora_cli").get("link_into_env", True))

    @property
    def plugin_units(self) -> List[PluginUnit]:
        return [PluginUnit.parse(e) for e in self._section("plugins").get("units") or []]

    @property
    def fail_on_build_error(self) -> bool:
        return bool(self._section("plugins").get("fail_on_build_error", True))

    def plugin_dir(self, unit: PluginUnit) -> Path:
        return (self.project_root / unit.path).absolute()


def load_provision_config(path: Optional[str] = None, *, project_root: Optional[str] = None) -> ProvisionConfig:
    """Load the shipped defaults, deep-merged with an optional YAML override."""

    raw = load_default_manifest()
    if path:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(path)
        if p.suffix.lower() not in {".yaml", ".yml"}:
            raise ValueError("provision config must be YAML")
        raw = _deep_merge(raw, load_yaml(p))

    mode = str((raw.get("dependencies") or {}).get("mode") or "pinned").lower()
    if mode not in INSTALL_MODES:
        raise ValueError(f"dependencies.mode must be one of {INSTALL_MODES}, got {mode}")

    root = Path(project_root or Path.cwd()).expanduser().absolute()
    return ProvisionConfig(raw=raw, project_root=root)
