from __future__ import annotations

import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, TextIO

from .config import ProvisionConfig
from .lib.command import CmdResult, run_cmd
from .lib.platforms import HostPlatform
from .lib.prompt import Prompter


@dataclass(frozen=True)
class ProvisionCtx:
    """Everything a step may consult: no step reads globals or re-detects the host."""

    cfg: ProvisionConfig
    platform: HostPlatform
    confirm: Prompter
    dry_run: bool = False
    runner: Callable[..., CmdResult] = run_cmd
    which: Callable[[str], Optional[str]] = shutil.which
    home: Path = field(default_factory=Path.home)
    out: TextIO = field(default_factory=lambda: sys.stdout)

    def run(self, argv: Sequence[str], **kwargs: Any) -> CmdResult:
        kwargs.setdefault("dry_run", self.dry_run)
        return self.runner(argv, **kwargs)

    @property
    def cargo_dora(self) -> Path:
        return self.home / ".cargo" / "bin" / "dora"
