from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def remove_tree(path: str | Path, *, dry_run: bool = False) -> None:
    p = Path(path)
    if not p.exists() and not p.is_symlink():
        return

    if dry_run:
        logger.info("Would remove %s", str(p))
        return

    if p.is_dir() and not p.is_symlink():
        shutil.rmtree(p)
    else:
        p.unlink()
    logger.debug("Removed %s", str(p))


def force_symlink(src: str | Path, dst: str | Path, *, dry_run: bool = False) -> None:
    """Point dst at src, replacing whatever dst was (ln -sf)."""

    s = Path(src)
    d = Path(dst)

    if dry_run:
        logger.info("Would link %s -> %s", str(d), str(s))
        return

    d.parent.mkdir(parents=True, exist_ok=True)
    if d.is_symlink() or d.exists():
        d.unlink()
    d.symlink_to(s)
