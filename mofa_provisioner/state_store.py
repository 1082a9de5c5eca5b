from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"yaml", "yml"}:
        return "yaml"
    # Default to JSON for unknown extensions.
    return "json"


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    text = p.read_text(encoding="utf-8")
    if _detect_format(p) == "yaml":
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")
    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) == "yaml":
        p.write_text(yaml.safe_dump(state, sort_keys=False) + "\n", encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True, default=str) + "\n", encoding="utf-8")


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Reset the per-run execution record, keeping run history counters."""

    state.setdefault("runs", 0)
    state["runs"] += 1
    state["execution"] = {
        "started_at": time.strftime("%Y-%m-%dT%H:%M:%S%z"),
        "stage": "start",
        "current_step": None,
        "completed_steps": [],
        "warnings": [],
        "errors": [],
        "tools": {},
        "plugins": {},
        "decisions": {},
    }
    return state


def record_warning(state: Dict[str, Any], step_id: str, message: str) -> None:
    state.setdefault("execution", {}).setdefault("warnings", []).append({"step": step_id, "message": message})


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)
