"""Single-admission guard for lifecycle hooks.

Hosts may deliver the same lifecycle hook more than once for one logical
operation (Composer fires the install hook for both the install and the
update command, and re-dispatches scripts to late-registered listeners).
Manifest injection is not idempotent, so each hook must run at most once
per guard.
"""
from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class LifecycleGuard:
    """Admit each hook id exactly once.

    State is per instance; every orchestrator owns its own guard.
    """

    def __init__(self) -> None:
        self._admitted: set[str] = set()

    def admit_once(self, hook_id: str) -> bool:
        """Return True the first time ``hook_id`` is seen, False afterwards."""
        if hook_id in self._admitted:
            logger.debug("Hook %s already ran; skipping", hook_id)
            return False
        self._admitted.add(hook_id)
        return True

    @property
    def admitted(self) -> frozenset[str]:
        return frozenset(self._admitted)


__all__ = ["LifecycleGuard"]
