from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .platforms import KNOWN_TAGS

PLUGIN_KINDS = ("python", "rust")


def _package_root() -> Path:
    # mofa_provisioner/lib/manifests.py -> mofa_provisioner
    return Path(__file__).resolve().parents[1]


def load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {p}")
    return data


def load_default_manifest() -> Dict[str, Any]:
    """Load the provisioning defaults shipped with the package."""
    return load_yaml(_package_root() / "manifests" / "provision.yaml")


@dataclass(frozen=True)
class Requirement:
    name: str
    version: Optional[str] = None
    index_url: Optional[str] = None
    platforms: Optional[List[str]] = None

    @property
    def spec(self) -> str:
        return f"{self.name}=={self.version}" if self.version else self.name

    @classmethod
    def parse(cls, raw: Any) -> "Requirement":
        # Accept the short "name==version" form as well as mappings.
        if isinstance(raw, str):
            name, _, version = raw.partition("==")
            return cls(name=name.strip(), version=version.strip() or None)
        if not isinstance(raw, dict) or not raw.get("name"):
            raise ValueError(f"Invalid requirement entry: {raw!r}")
        platforms = raw.get("platforms")
        if platforms is not None and not isinstance(platforms, list):
            raise ValueError(f"Requirement {raw['name']}: platforms must be a list")
        version = raw.get("version")
        return cls(
            name=str(raw["name"]).strip(),
            version=str(version).strip() if version is not None else None,
            index_url=raw.get("index_url"),
            platforms=[str(p) for p in platforms] if platforms else None,
        )


@dataclass(frozen=True)
class PluginUnit:
    name: str
    kind: str
    path: str
    package: Optional[str] = None
    optional: bool = False

    @classmethod
    def parse(cls, raw: Any) -> "PluginUnit":
        if not isinstance(raw, dict) or not raw.get("name"):
            raise ValueError(f"Invalid plugin entry: {raw!r}")
        kind = str(raw.get("kind") or "python").lower()
        if kind not in PLUGIN_KINDS:
            raise ValueError(f"Plugin {raw['name']}: kind must be one of {PLUGIN_KINDS}, got {kind}")
        name = str(raw["name"])
        return cls(
            name=name,
            kind=kind,
            path=str(raw.get("path") or f"node-hub/{name}"),
            package=raw.get("package"),
            optional=bool(raw.get("optional", False)),
        )


def check_consistency(raw: Dict[str, Any]) -> List[str]:
    """Report drift inside a provisioning document.

    Returns human-readable problems; an empty list means consistent.
    """

    problems: List[str] = []
    deps = raw.get("dependencies") or {}

    pins: Dict[str, Optional[str]] = {}
    for entry in deps.get("packages") or []:
        req = Requirement.parse(entry)
        key = req.name.lower()
        if key in pins and pins[key] != req.version:
            problems.append(f"dependency {req.name} pinned twice ({pins[key]} vs {req.version})")
        pins.setdefault(key, req.version)
        for tag in req.platforms or []:
            if tag not in KNOWN_TAGS:
                problems.append(f"dependency {req.name} restricted to unknown platform tag {tag!r}")

    for entry in deps.get("repin") or []:
        req = Requirement.parse(entry)
        key = req.name.lower()
        if key not in pins:
            problems.append(f"repin {req.name} is not part of the dependency manifest")
        elif pins[key] != req.version:
            problems.append(f"repin {req.name}=={req.version} disagrees with manifest pin {pins[key]}")

    seen: set[str] = set()
    for entry in (raw.get("plugins") or {}).get("units") or []:
        unit = PluginUnit.parse(entry)
        if unit.name in seen:
            problems.append(f"plugin {unit.name} listed twice")
        seen.add(unit.name)

    for family in (raw.get("system_packages") or {}):
        if family not in KNOWN_TAGS:
            problems.append(f"system_packages has unknown platform {family!r}")

    return problems
