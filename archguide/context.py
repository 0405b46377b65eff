from __future__ import annotations

from dataclasses import dataclass, field

from .lib.env import Paths
from .lib.prompt import Prompter
from .lib.ui import Terminal
from .state_store import PersistentStore


@dataclass
class InstallContext:
    """Everything a probe or step body may touch during one run."""

    store: PersistentStore
    ui: Prompter = field(default_factory=Prompter)
    paths: Paths = field(default_factory=Paths)
    # --no-skip-completed
    force: bool = False

    @property
    def term(self) -> Terminal:
        return self.ui.term
