import logging
from typing import Optional

from gi.repository import Gdk, Gtk

from fabric.core.service import Property, Service, Signal

from selector.components.mode_switcher import Mode
from selector.components.selection_engine import PRIMARY, SelectionEngine
from selector.components.selection_models import (
    KeyPress,
    PageView,
    PasteDelivery,
    SessionResult,
)
from selector.components.selector_config import SelectorConfig


logger = logging.getLogger(__name__)


class SelectorService(Service):
    @Property(str, flags="read-write")
    def prompt(self) -> str:
        return self._prompt

    def _set_prompt(self, value: str):
        if value == getattr(self, "_prompt", ""):
            return
        self._prompt = value

    prompt = prompt.setter(_set_prompt)

    @Property(str, flags="readable")
    def query(self) -> str:
        return self._query

    @Property(int, flags="readable")
    def cursor(self) -> int:
        return self._cursor

    @Property(object, flags="readable")
    def page(self) -> PageView:
        return self._page

    @Signal
    def page_changed(self) -> None: ...

    @Signal
    def finished(self, result: object) -> None: ...

    def __init__(self, config: SelectorConfig, **kwargs):
        super().__init__(**kwargs)
        self._config = config
        self._prompt: str = ""
        self._query: str = ""
        self._cursor: int = 0
        self._page: PageView = PageView.empty()
        self._engine: Optional[SelectionEngine] = None

    @property
    def engine(self) -> Optional[SelectionEngine]:
        return self._engine

    def start_session(self, mode: Mode, query: str = "") -> None:
        config = self._config
        candidates = mode.candidates()
        self._engine = SelectionEngine(
            candidates,
            mode.matcher(),
            mode.matcher_context(),
            query=query,
            selected_index=mode.active_index(),
            layout=config.layout(),
            sorting=config.levenshtein_sort,
            auto_accept=config.auto_accept,
            cancel_keys=config.accelerators(),
            on_paste_request=self._request_paste,
        )
        self.prompt = mode.prompt
        logger.debug(
            "selector service: %s session with %d candidates",
            mode.name,
            len(candidates),
        )
        self._settle(self._engine.start())

    def feed_key(self, key: KeyPress) -> bool:
        engine = self._engine
        if engine is None or engine.finished:
            return False
        self._settle(engine.feed(key))
        return True

    def cancel(self) -> None:
        engine = self._engine
        if engine is None or engine.finished:
            return
        self.feed_key(KeyPress("Escape"))

    def _settle(self, result: Optional[SessionResult]) -> None:
        engine = self._engine
        if engine is None:
            return
        if engine.needs_redraw:
            self._query = engine.query
            self._cursor = engine.cursor
            self._page = engine.page()
            self.page_changed()
        if result is not None:
            self._engine = None
            self.finished(result)

    def _request_paste(self, selection: str) -> None:
        atom = Gdk.SELECTION_PRIMARY if selection == PRIMARY else Gdk.SELECTION_CLIPBOARD
        clipboard = Gtk.Clipboard.get(atom)
        if clipboard is None:
            logger.debug("selector service: no %s clipboard", selection)
            return
        engine = self._engine

        def _on_text(_clipboard, text):
            if self._engine is not engine or engine.finished:
                return
            self._settle(engine.feed(PasteDelivery(text)))

        try:
            clipboard.request_text(_on_text)
        except (RuntimeError, ValueError):
            logger.exception("selector service: paste request failed")
