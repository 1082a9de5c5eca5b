from __future__ import annotations

import logging
import os
import platform
import shutil
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, Mapping, Optional

logger = logging.getLogger(__name__)

Which = Callable[[str], Optional[str]]


class PlatformFamily(str, Enum):
    DEBIAN = "debian"
    RHEL = "rhel"
    FEDORA = "fedora"
    MACOS = "macos"
    UNKNOWN = "unknown"


# Probe order matters: hosts that ship both yum and dnf resolve to rhel.
_LINUX_PACKAGE_MANAGERS = (
    ("apt-get", PlatformFamily.DEBIAN),
    ("yum", PlatformFamily.RHEL),
    ("dnf", PlatformFamily.FEDORA),
)

KNOWN_TAGS = frozenset({f.value for f in PlatformFamily} | {"amd64", "arm64", "armhf", "apple_silicon"})


def normalize_arch(machine: str) -> str:
    m = machine.lower()
    return {
        "x86_64": "amd64",
        "amd64": "amd64",
        "aarch64": "arm64",
        "arm64": "arm64",
        "armv7l": "armhf",
        "armv6l": "armhf",
    }.get(m, m)


@dataclass(frozen=True)
class HostPlatform:
    family: PlatformFamily
    arch: str

    @property
    def is_macos(self) -> bool:
        return self.family is PlatformFamily.MACOS

    @property
    def tags(self) -> FrozenSet[str]:
        tags = {self.family.value, self.arch}
        if self.is_macos and self.arch == "arm64":
            tags.add("apple_silicon")
        return frozenset(tags)

    def matches(self, platforms: Optional[list[str]]) -> bool:
        """True when a platform restriction list admits this host (empty = any)."""
        if not platforms:
            return True
        return bool(self.tags.intersection(platforms))


def _is_darwin(environ: Mapping[str, str], sys_platform: str) -> bool:
    ostype = environ.get("OSTYPE")
    if ostype:
        return ostype.lower().startswith("darwin")
    return sys_platform == "darwin"


def detect_platform(
    *,
    environ: Optional[Mapping[str, str]] = None,
    which: Which = shutil.which,
    sys_platform: Optional[str] = None,
    machine: Optional[str] = None,
) -> HostPlatform:
    """Detect the host platform once at startup."""

    environ = os.environ if environ is None else environ
    sys_platform = sys.platform if sys_platform is None else sys_platform
    arch = normalize_arch(machine if machine is not None else platform.machine())

    if _is_darwin(environ, sys_platform):
        family = PlatformFamily.MACOS
    else:
        family = PlatformFamily.UNKNOWN
        for tool, fam in _LINUX_PACKAGE_MANAGERS:
            if which(tool):
                family = fam
                break

    host = HostPlatform(family=family, arch=arch)
    logger.info("Platform: family=%s arch=%s", host.family.value, host.arch)
    return host
