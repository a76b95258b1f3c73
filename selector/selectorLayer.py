import logging
from typing import Optional

from gi.repository import Gdk, GLib

from fabric.widgets.wayland import WaylandWindow as Window

from actions.open_selector.mode_resolver import build_modes
from selector.components.mode_switcher import ModeSwitcher
from selector.components.selection_models import SessionResult
from selector.components.selector_config import SelectorConfig, get_config
from selector.selectorBox import SelectorBox
from selector.selectorService import SelectorService
from util.singleton_layer import SingletonLayerMixin


logger = logging.getLogger(__name__)


def _monitor_width(fallback: int = 1920) -> int:
    display = Gdk.Display.get_default()
    if display is None:
        return fallback
    monitor = display.get_primary_monitor() or display.get_monitor(0)
    if monitor is None:
        return fallback
    return monitor.get_geometry().width


class SelectorLayer(SingletonLayerMixin, Window):
    def __init__(self, mode: Optional[str] = None, config: Optional[SelectorConfig] = None):
        if not self._prepare_singleton():
            return

        self.config = config or get_config()
        self.switcher = ModeSwitcher(build_modes(self.config.modes, self.config))
        service = SelectorService(self.config)
        box = SelectorBox(
            controller=service,
            width=self.config.window_width(_monitor_width()),
        )

        super().__init__(
            name="selector-layer",
            anchor="top",
            layer="overlay",
            exclusive_zone=0,
            keyboard_mode="exclusive",
            all_visible=True,
            child=box,
            margin="300px 0px 0px 0px",
        )
        self.service = service
        self.child = box
        self._register_singleton_cleanup()

        self.service.connect(
            "finished",
            lambda _service, result: self._on_finished(result),
        )
        self.reopen(mode)

    def reopen(self, mode: Optional[str] = None) -> None:
        """Start a session in ``mode`` (or the current one), keeping the query."""
        if mode:
            try:
                self.switcher.select(mode)
            except KeyError:
                logger.warning("selector layer: unknown mode %s", mode)
                return
        self.show_all()
        self.service.start_session(self.switcher.current, self.switcher.query)

        def _focus_later():
            try:
                self.child.search_entry.grab_focus()
            except (AttributeError, RuntimeError):
                pass
            return False

        GLib.idle_add(_focus_later)

    def _on_finished(self, result: SessionResult) -> None:
        next_mode = self.switcher.advance(result)
        if next_mode is None:
            self._close_selector()
            return
        # reuse the window so switching modes does not flicker
        GLib.idle_add(self._start_next)

    def _start_next(self) -> bool:
        self.service.start_session(self.switcher.current, self.switcher.query)
        return False

    def _close_selector(self):
        if hasattr(self, "close"):
            self.close()
        else:
            self.application.quit()
