from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    capture: bool = False,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - Output streams straight to the terminal unless capture=True
      (package installs and cargo builds are long and chatty).
    - cwd applies to the child process only; the provisioner's own
      working directory never changes.
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("CMD %s%s", fmt_argv(argv_list), f" (cwd={cwd})" if cwd else "")

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    pipe = subprocess.PIPE if capture else None
    try:
        p = subprocess.run(
            argv_list,
            input=input_text,
            text=True,
            stdout=pipe,
            stderr=pipe,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
        )
    except FileNotFoundError as e:
        raise CommandError(argv_list, 127, str(e)) from e

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if check and p.returncode != 0:
        raise CommandError(argv_list, p.returncode, stderr)

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)
