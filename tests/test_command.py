import os
import sys

import pytest

from mofa_provisioner.errors import CommandError
from mofa_provisioner.lib.command import run_cmd
from mofa_provisioner.lib.tools import extract_semver, probe_tool

from .conftest import FakeWhich


def test_captures_output():
    r = run_cmd([sys.executable, "-c", "print('hello')"], capture=True)

    assert r.ok
    assert r.stdout.strip() == "hello"


def test_child_cwd_does_not_leak(tmp_path):
    before = os.getcwd()
    r = run_cmd([sys.executable, "-c", "import os; print(os.getcwd())"], capture=True, cwd=str(tmp_path))

    assert r.stdout.strip() == str(tmp_path.resolve())
    assert os.getcwd() == before


def test_nonzero_exit_raises_when_checked():
    with pytest.raises(CommandError) as ei:
        run_cmd([sys.executable, "-c", "import sys; sys.exit(3)"], capture=True)
    assert ei.value.returncode == 3
    assert ei.value.hint


def test_nonzero_exit_returned_when_unchecked():
    r = run_cmd([sys.executable, "-c", "import sys; sys.exit(2)"], check=False, capture=True)
    assert r.returncode == 2


def test_missing_executable_raises_command_error():
    with pytest.raises(CommandError) as ei:
        run_cmd(["definitely-not-a-real-tool-xyz"])
    assert ei.value.returncode == 127


def test_dry_run_does_not_execute(tmp_path):
    marker = tmp_path / "m"
    r = run_cmd([sys.executable, "-c", f"open({str(marker)!r}, 'w')"], dry_run=True)

    assert r.ok
    assert not marker.exists()


def test_probe_tool(runner):
    present = probe_tool("uv", which=FakeWhich(["uv"]), runner=runner)
    missing = probe_tool("cargo", which=FakeWhich(["uv"]), runner=runner)

    assert present.present and present.version == "uv 1.0.0"
    assert not missing.present and missing.version is None


def test_extract_semver():
    assert extract_semver("dora-cli 0.3.12") == "0.3.12"
    assert extract_semver("no version") is None
