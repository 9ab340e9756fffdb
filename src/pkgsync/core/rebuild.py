"""External rebuild triggers.

After reconciliation the orchestrator asks two external rebuilders (the
resource repository and the discovery index) to clear and rebuild. The
rebuilders own their own consistency; pkgsync only sequences them.
"""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable

from pkgsync.core.config import RebuildCommands

logger = logging.getLogger(__name__)


@runtime_checkable
class Rebuilder(Protocol):
    """A two-step "clear then build" external rebuilder."""

    name: str

    def clear(self) -> None:
        ...

    def build(self) -> None:
        ...


class CommandRebuilder:
    """Rebuilder that runs configured commands.

    Each step is an argv list run without a shell in ``cwd``. An empty
    command makes the step a no-op. Failures propagate as
    :class:`subprocess.CalledProcessError` or :class:`OSError`.
    """

    def __init__(
        self,
        name: str,
        *,
        clear_command: Sequence[str] = (),
        build_command: Sequence[str] = (),
        cwd: Path | None = None,
    ) -> None:
        self.name = name
        self.clear_command = tuple(clear_command)
        self.build_command = tuple(build_command)
        self.cwd = cwd

    @classmethod
    def from_commands(cls, name: str, commands: RebuildCommands, *, cwd: Path | None = None) -> CommandRebuilder:
        return cls(name, clear_command=commands.clear, build_command=commands.build, cwd=cwd)

    def _run(self, step: str, command: tuple[str, ...]) -> None:
        if not command:
            logger.debug("No %s command configured for %s", step, self.name)
            return
        logger.info("Running %s %s: %s", self.name, step, " ".join(command))
        subprocess.run(
            list(command),
            cwd=str(self.cwd) if self.cwd else None,
            check=True,
            capture_output=True,
            text=True,
        )

    def clear(self) -> None:
        self._run("clear", self.clear_command)

    def build(self) -> None:
        self._run("build", self.build_command)


__all__ = ["Rebuilder", "CommandRebuilder"]
