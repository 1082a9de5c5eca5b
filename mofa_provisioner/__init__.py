"""MoFA voice-chat environment provisioner (Python-first, step-driven).

Core design goals:
- Idempotent steps, run once each in a fixed order
- Fail fast: the first fatal step stops the run, nothing is rolled back
- Platform detected once and passed explicitly to every step
- Package lists and pins live in YAML, not in code
- Centralized logging
"""

__all__ = []
