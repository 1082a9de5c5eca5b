from __future__ import annotations

import shlex
from typing import Optional, Sequence


class ProvisionError(RuntimeError):
    """Fatal provisioning failure. Aborts the pipeline."""

    def __init__(self, message: str, *, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.hint = hint


class CommandError(ProvisionError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        cmd = " ".join(shlex.quote(a) for a in self.argv)
        msg = f"Command failed ({returncode}): {cmd}"
        if stderr.strip():
            msg += f"\n{stderr.strip()}"
        super().__init__(msg, hint=f"Re-run manually to inspect: {cmd}")
