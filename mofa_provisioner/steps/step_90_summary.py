from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..context import ProvisionCtx
from ..pipeline import Stage, StepResult

logger = logging.getLogger(__name__)

RULE = "=" * 44


def render_summary(ctx: ProvisionCtx, state: Dict[str, Any]) -> str:
    exe = state.get("execution") or {}
    cfg = ctx.cfg
    env_dir = cfg.env_dir
    plugins = exe.get("plugins") or {}

    lines: List[str] = ["", RULE, "Setup Complete!", RULE, ""]
    lines.append(f"Environment Location: {env_dir}")
    lines.append(f"Python Version: {cfg.python_version}")
    lines.append(f"Dependency Management: uv ({cfg.install_mode})")
    lines.append("")

    lines.append("TTS Backends Installed:")
    lines.append("  CPU (kokoro) - cross-platform, best for short text")
    if ctx.platform.is_macos:
        if cfg.install_mode == "pinned":
            lines.append("  MLX (mlx-audio) - Apple Silicon GPU, best for long text")
            lines.append("  Select with BACKEND=cpu | mlx | auto (default)")
        else:
            lines.append("  MLX not installed automatically; run: uv pip install mlx-audio")
    lines.append("")

    built = sorted(n for n, s in plugins.items() if s == "built")
    not_built = sorted(f"{n} ({s})" for n, s in plugins.items() if s != "built")
    if built:
        lines.append("Nodes installed/built: " + ", ".join(built))
    if not_built:
        lines.append("Nodes not built: " + ", ".join(not_built))

    warnings = exe.get("warnings") or []
    if warnings:
        lines.append("")
        lines.append(f"Warnings ({len(warnings)}):")
        lines += [f"  - [{w.get('step')}] {w.get('message')}" for w in warnings]
    lines.append("")

    lines += [
        "To activate the environment:",
        f"  source {env_dir}/bin/activate",
        "",
        "Or use uv run directly:",
        "  uv run <command>",
        "",
        "Next steps:",
        "  1. Download models: cd examples/model-manager && uv run python download_models.py --download primespeech",
        "  2. Download additional models (funasr, kokoro, qwen) as needed",
        "  3. Configure any required API keys (e.g. OpenAI)",
        "  4. Run the voice-chat example:",
        f"     cd {cfg.project_root}/examples/mac-aec-chat",
        "     dora up",
        "     dora start voice-chat-with-aec.yml",
        "",
    ]
    return "\n".join(lines)


class SummaryStep:
    step_id = "90_summary"
    reaches = Stage.SUMMARIZED

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> StepResult:
        ctx.out.write(render_summary(ctx, state) + "\n")
        ctx.out.flush()
        return StepResult.ok()
