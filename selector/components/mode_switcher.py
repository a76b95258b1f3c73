from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional, Protocol, Sequence

from selector.components.matcher import Matcher
from selector.components.selection_models import (
    CandidateSet,
    OutcomeKind,
    SessionResult,
)


logger = logging.getLogger(__name__)


class ModeAction(Enum):
    EXIT = "exit"
    RELOAD = "reload"


class Mode(Protocol):
    """A named candidate source plus what to do with a session's result."""

    name: str
    prompt: str

    def candidates(self) -> CandidateSet: ...

    def active_index(self) -> Optional[int]: ...

    def matcher(self) -> Matcher: ...

    def matcher_context(self) -> object: ...

    def handle(self, result: SessionResult) -> ModeAction: ...


class ModeSwitcher:
    """Ordered set of modes chained by NEXT_LIST and QUICK_JUMP outcomes."""

    def __init__(self, modes: Iterable[Mode]):
        self._modes: List[Mode] = list(modes)
        if not self._modes:
            raise ValueError("mode switcher needs at least one mode")
        self._current: int = 0
        self.query: str = ""

    @property
    def modes(self) -> Sequence[Mode]:
        return tuple(self._modes)

    @property
    def current(self) -> Mode:
        return self._modes[self._current]

    @property
    def current_index(self) -> int:
        return self._current

    def index_of(self, name: str) -> int:
        key = (name or "").lower().strip()
        for index, mode in enumerate(self._modes):
            if mode.name.lower() == key:
                return index
        return -1

    def get(self, name: str) -> Mode:
        index = self.index_of(name)
        if index < 0:
            raise KeyError(f"mode not found: {name}")
        return self._modes[index]

    def select(self, name_or_index) -> Mode:
        if isinstance(name_or_index, int):
            self._current = name_or_index % len(self._modes)
        else:
            index = self.index_of(name_or_index)
            if index < 0:
                raise KeyError(f"mode not found: {name_or_index}")
            self._current = index
        return self.current

    def advance(self, result: SessionResult) -> Optional[Mode]:
        """Hand ``result`` to the current mode and pick the next one.

        Returns ``None`` when the chain is over.
        """
        self.query = result.query
        kind = result.kind
        if kind is OutcomeKind.NEXT_LIST:
            self._current = (self._current + 1) % len(self._modes)
        elif kind is OutcomeKind.QUICK_JUMP:
            self._current = (result.index or 0) % len(self._modes)
        else:
            action = self.current.handle(result)
            if action is not ModeAction.RELOAD:
                logger.debug("mode switcher: %s finished with %s", self.current.name, kind.value)
                return None
        logger.debug("mode switcher: switching to %s", self.current.name)
        return self.current

    def run(self, start: str, session: Callable[[Mode, str], SessionResult]) -> None:
        """Blocking chain: ``session(mode, query)`` runs one selection."""
        mode: Optional[Mode] = self.select(start)
        while mode is not None:
            mode = self.advance(session(mode, self.query))
