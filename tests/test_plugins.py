import dataclasses

import pytest

from mofa_provisioner.config import ProvisionConfig
from mofa_provisioner.errors import ProvisionError
from mofa_provisioner.pipeline import StepStatus
from mofa_provisioner.steps import BuildPluginsStep, CheckPrerequisitesStep


def _node(ctx, name):
    d = ctx.cfg.project_root / "node-hub" / name
    d.mkdir(parents=True)
    return d


def _prepare(ctx, state):
    CheckPrerequisitesStep().run(ctx, state)
    ctx.runner.calls.clear()
    ctx.runner.kwargs.clear()


def test_absent_units_are_skipped_with_warnings(make_ctx, runner, state):
    ctx = make_ctx()
    _prepare(ctx, state)

    result = BuildPluginsStep().run(ctx, state)

    assert result.status is StepStatus.WARNING
    assert len(result.messages) == 3
    assert runner.calls == []
    assert set(state["execution"]["plugins"].values()) == {"absent"}


def test_present_units_are_installed_and_built(make_ctx, runner, state):
    ctx = make_ctx()
    _prepare(ctx, state)
    asr = _node(ctx, "dora-asr")
    maas = _node(ctx, "dora-maas-client")
    ws = _node(ctx, "dora-openai-websocket")

    result = BuildPluginsStep().run(ctx, state)

    assert result.status is StepStatus.OK
    assert runner.calls == [
        ["uv", "pip", "install", "-e", str(asr)],
        ["cargo", "build", "--release", "--manifest-path", str(maas / "Cargo.toml")],
        ["cargo", "build", "--release", "--manifest-path", str(ws / "Cargo.toml"), "-p", "dora-openai-websocket"],
    ]
    assert runner.kwargs[1]["cwd"] == str(maas)
    assert set(state["execution"]["plugins"].values()) == {"built"}


def test_rust_units_skipped_without_cargo(make_ctx, runner, state):
    ctx = make_ctx(tools=("uv", "python3", "git"))
    _prepare(ctx, state)
    _node(ctx, "dora-asr")
    _node(ctx, "dora-maas-client")

    result = BuildPluginsStep().run(ctx, state)

    assert result.status is StepStatus.WARNING
    assert runner.commands("cargo") == []
    assert state["execution"]["plugins"]["dora-maas-client"] == "skipped"
    assert state["execution"]["plugins"]["dora-asr"] == "built"


def test_build_failure_is_fatal_by_default(make_ctx, runner, state):
    ctx = make_ctx()
    _prepare(ctx, state)
    _node(ctx, "dora-maas-client")
    _node(ctx, "dora-openai-websocket")
    runner.fail_when(lambda argv: argv[0] == "cargo")

    with pytest.raises(ProvisionError, match="dora-maas-client"):
        BuildPluginsStep().run(ctx, state)
    assert state["execution"]["plugins"]["dora-maas-client"] == "failed"
    assert "dora-openai-websocket" not in state["execution"]["plugins"]


def test_build_failure_can_be_downgraded(make_ctx, runner, state):
    ctx = make_ctx()
    raw = dict(ctx.cfg.raw)
    raw["plugins"] = dict(raw["plugins"], fail_on_build_error=False)
    ctx = dataclasses.replace(ctx, cfg=ProvisionConfig(raw=raw, project_root=ctx.cfg.project_root))
    _prepare(ctx, state)
    _node(ctx, "dora-maas-client")
    _node(ctx, "dora-openai-websocket")
    runner.fail_when(lambda argv: "dora-maas-client" in " ".join(argv))

    result = BuildPluginsStep().run(ctx, state)

    assert result.status is StepStatus.WARNING
    assert state["execution"]["plugins"]["dora-maas-client"] == "failed"
    assert state["execution"]["plugins"]["dora-openai-websocket"] == "built"


def test_optional_unit_failure_is_a_warning_under_fatal_policy(make_ctx, runner, state):
    ctx = make_ctx()
    raw = dict(ctx.cfg.raw)
    raw["plugins"] = dict(raw["plugins"], units=[
        {"name": "dora-kokoro-tts", "kind": "python", "optional": True},
        {"name": "dora-asr", "kind": "python"},
    ])
    ctx = dataclasses.replace(ctx, cfg=ProvisionConfig(raw=raw, project_root=ctx.cfg.project_root))
    _prepare(ctx, state)
    _node(ctx, "dora-kokoro-tts")
    _node(ctx, "dora-asr")
    runner.fail_when(lambda argv: "dora-kokoro-tts" in " ".join(argv))

    result = BuildPluginsStep().run(ctx, state)

    assert ctx.cfg.fail_on_build_error
    assert result.status is StepStatus.WARNING
    assert result.messages == ["dora-kokoro-tts failed to build"]
    assert state["execution"]["plugins"] == {"dora-kokoro-tts": "failed", "dora-asr": "built"}
