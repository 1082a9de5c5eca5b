from pathlib import Path

from mofa_provisioner.pipeline import StepStatus
from mofa_provisioner.steps import CreateEnvironmentStep

from .conftest import Answers


def _snapshot(root: Path):
    return sorted((str(p.relative_to(root)), p.read_bytes() if p.is_file() else None) for p in root.rglob("*"))


def _seed_env(env_dir: Path) -> None:
    (env_dir / "bin").mkdir(parents=True)
    (env_dir / "bin" / "python").write_text("old", encoding="utf-8")
    (env_dir / "marker.txt").write_text("from a previous run", encoding="utf-8")


def test_creates_environment_when_absent(make_ctx, runner, state):
    answers = Answers()
    ctx = make_ctx(confirm=answers)

    result = CreateEnvironmentStep().run(ctx, state)

    assert result.status is StepStatus.OK
    assert runner.commands("uv", "venv") == [["uv", "venv", "--python", "3.12", str(ctx.cfg.env_dir)]]
    assert ctx.cfg.env_dir.is_dir()
    assert answers.questions == []
    assert state["execution"]["decisions"]["environment"] == "created"


def test_declining_twice_leaves_environment_untouched(make_ctx, runner, state):
    answers = Answers(False, False)
    ctx = make_ctx(confirm=answers)
    _seed_env(ctx.cfg.env_dir)
    before = _snapshot(ctx.cfg.env_dir)

    step = CreateEnvironmentStep()
    assert step.run(ctx, state).status is StepStatus.OK
    assert step.run(ctx, state).status is StepStatus.OK

    assert _snapshot(ctx.cfg.env_dir) == before
    assert runner.calls == []
    assert len(answers.questions) == 2
    assert state["execution"]["decisions"]["environment"] == "reused"


def test_accepting_recreation_drops_previous_files(make_ctx, runner, state):
    ctx = make_ctx(confirm=Answers(True))
    _seed_env(ctx.cfg.env_dir)

    CreateEnvironmentStep().run(ctx, state)

    assert ctx.cfg.env_dir.is_dir()
    assert list(ctx.cfg.env_dir.rglob("*")) == []
    assert len(runner.commands("uv", "venv")) == 1


def test_dry_run_keeps_existing_environment(make_ctx, runner, state):
    ctx = make_ctx(confirm=Answers(True), dry_run=True)
    _seed_env(ctx.cfg.env_dir)

    CreateEnvironmentStep().run(ctx, state)

    assert (ctx.cfg.env_dir / "marker.txt").exists()
