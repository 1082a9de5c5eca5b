from __future__ import annotations

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Prompter = Callable[[str], bool]


def make_prompter(
    *,
    assume: Optional[bool] = None,
    read: Callable[[str], str] = input,
) -> Prompter:
    """Return a yes/no prompter.

    assume=True/False answers every question without reading stdin.
    Otherwise the first character of the typed reply decides; end of
    input counts as "no".
    """

    def confirm(question: str) -> bool:
        if assume is not None:
            logger.info("%s (y/n): %s [non-interactive]", question, "y" if assume else "n")
            return assume
        try:
            reply = read(f"{question} (y/n): ")
        except EOFError:
            logger.info("No answer on stdin; treating as 'n'")
            return False
        return reply.strip()[:1].lower() == "y"

    return confirm
