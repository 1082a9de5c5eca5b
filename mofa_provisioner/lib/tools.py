from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..errors import CommandError
from .command import CmdResult

logger = logging.getLogger(__name__)

_SEMVER = re.compile(r"\d+\.\d+\.\d+")


@dataclass(frozen=True)
class ToolStatus:
    name: str
    present: bool
    path: Optional[str] = None
    version: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {"present": self.present, "path": self.path, "version": self.version}


def extract_semver(text: str) -> Optional[str]:
    m = _SEMVER.search(text or "")
    return m.group(0) if m else None


def probe_tool(
    name: str,
    *,
    which: Callable[[str], Optional[str]],
    runner: Callable[..., CmdResult],
) -> ToolStatus:
    """Locate a tool on PATH and read its `--version` banner (best-effort)."""

    path = which(name)
    if not path:
        return ToolStatus(name=name, present=False)

    version: Optional[str] = None
    try:
        r = runner([name, "--version"], check=False, capture=True)
        banner = (r.stdout or r.stderr).strip()
        version = banner.splitlines()[0] if banner else None
    except CommandError:
        logger.debug("Could not read version of %s", name)
    return ToolStatus(name=name, present=True, path=path, version=version)
