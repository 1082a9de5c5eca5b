from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import pytest

from mofa_provisioner.config import load_provision_config
from mofa_provisioner.context import ProvisionCtx
from mofa_provisioner.errors import CommandError
from mofa_provisioner.lib.command import CmdResult
from mofa_provisioner.lib.platforms import HostPlatform, PlatformFamily
from mofa_provisioner.state_store import ensure_defaults

SMALL_CONFIG = """\
environment:
  path: .venv
  python_version: "3.12"
dependencies:
  mode: pinned
  packages:
    - {name: numpy, version: "1.26.4"}
    - {name: torch, version: "2.2.0", index_url: "https://download.pytorch.org/whl/cpu"}
    - {name: mlx-audio, platforms: [macos]}
  nltk_corpora: [cmudict]
  repin:
    - {name: numpy, version: "1.26.4"}
sudo: false
plugins:
  fail_on_build_error: true
  units:
    - {name: dora-asr, kind: python}
    - {name: dora-maas-client, kind: rust}
    - {name: dora-openai-websocket, kind: rust, package: dora-openai-websocket}
"""


class FakeRunner:
    """Records argv lists and mimics the side effects the steps rely on."""

    def __init__(self, home: Path, *, dora_version: str = "0.3.12") -> None:
        self.home = home
        self.dora_version = dora_version
        self.calls: List[List[str]] = []
        self.kwargs: List[dict] = []
        self.failures: List[Callable[[List[str]], bool]] = []

    def fail_when(self, predicate: Callable[[List[str]], bool]) -> None:
        self.failures.append(predicate)

    def __call__(self, argv: Sequence[str], *, check: bool = True, dry_run: bool = False, **kwargs) -> CmdResult:
        argv = list(argv)
        self.calls.append(argv)
        self.kwargs.append(kwargs)

        if any(f(argv) for f in self.failures):
            if check:
                raise CommandError(argv, 1, "boom")
            return CmdResult(argv=argv, returncode=1, stdout="", stderr="boom")

        stdout = ""
        if argv[1:] == ["--version"]:
            name = Path(argv[0]).name
            stdout = f"dora-cli {self.dora_version}\n" if name == "dora" else f"{name} 1.0.0\n"
        elif argv[:2] == ["uv", "venv"] and not dry_run:
            Path(argv[-1]).mkdir(parents=True, exist_ok=True)
        elif argv[:2] == ["cargo", "install"] and not dry_run:
            binary = self.home / ".cargo" / "bin" / "dora"
            binary.parent.mkdir(parents=True, exist_ok=True)
            binary.write_text("#!/bin/sh\n", encoding="utf-8")
        return CmdResult(argv=argv, returncode=0, stdout=stdout, stderr="")

    def commands(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if c[: len(prefix)] == list(prefix)]


class FakeWhich:
    def __init__(self, tools: Sequence[str]) -> None:
        self.tools = set(tools)

    def __call__(self, name: str) -> Optional[str]:
        return f"/usr/bin/{name}" if name in self.tools else None


class Answers:
    """Scripted prompt answers; records every question asked."""

    def __init__(self, *answers: bool) -> None:
        self.answers = list(answers)
        self.questions: List[str] = []

    def __call__(self, question: str) -> bool:
        self.questions.append(question)
        return self.answers.pop(0) if self.answers else False


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    (root / "provision.yaml").write_text(SMALL_CONFIG, encoding="utf-8")
    return root


@pytest.fixture
def home(tmp_path: Path) -> Path:
    h = tmp_path / "home"
    h.mkdir()
    return h


@pytest.fixture
def runner(home: Path) -> FakeRunner:
    return FakeRunner(home)


@pytest.fixture
def make_ctx(project: Path, home: Path, runner: FakeRunner):
    def _make(
        *,
        family: PlatformFamily = PlatformFamily.DEBIAN,
        arch: str = "amd64",
        tools: Sequence[str] = ("uv", "python3", "git", "cargo", "apt-get"),
        confirm: Optional[Callable[[str], bool]] = None,
        dry_run: bool = False,
    ) -> ProvisionCtx:
        cfg = load_provision_config(str(project / "provision.yaml"), project_root=str(project))
        return ProvisionCtx(
            cfg=cfg,
            platform=HostPlatform(family=family, arch=arch),
            confirm=confirm or Answers(),
            dry_run=dry_run,
            runner=runner,
            which=FakeWhich(tools),
            home=home,
            out=io.StringIO(),
        )

    return _make


@pytest.fixture
def state() -> Dict:
    return ensure_defaults({})


@pytest.fixture
def no_logging_setup(monkeypatch):
    monkeypatch.setattr("mofa_provisioner.main.configure_logging", lambda log_path, **_: log_path)
