import logging
from typing import List, Optional

from gi.repository import Gdk, GLib

from fabric.widgets.box import Box
from fabric.widgets.entry import Entry
from fabric.widgets.label import Label

from selector.components.pager import ResolvedLayout
from selector.components.selection_models import KeyPress
from selector.selectorService import SelectorService


logger = logging.getLogger(__name__)

_MODIFIER_KEYS = {
    "Shift_L", "Shift_R",
    "Control_L", "Control_R",
    "Alt_L", "Alt_R",
    "Super_L", "Super_R",
}


def key_press_from_gdk(event) -> Optional[KeyPress]:
    name = Gdk.keyval_name(event.keyval)
    if not name:
        return None
    codepoint = Gdk.keyval_to_unicode(event.keyval)
    state = event.state
    return KeyPress(
        key=name,
        text=chr(codepoint) if codepoint else "",
        shift=bool(state & Gdk.ModifierType.SHIFT_MASK),
        control=bool(state & Gdk.ModifierType.CONTROL_MASK),
        alt=bool(state & Gdk.ModifierType.MOD1_MASK),
        super=bool(state & (Gdk.ModifierType.SUPER_MASK | Gdk.ModifierType.MOD4_MASK)),
    )


class SelectorBox(Box):
    def __init__(
        self,
        controller: SelectorService,
        width: int = 640,
        **kwargs,
    ):
        super().__init__(
            name="selector-root",
            orientation="v",
            spacing=6,
            h_expand=True,
            v_expand=False,
            **kwargs,
        )

        self.service = controller
        self._layout: Optional[ResolvedLayout] = None
        self._cells: List[Label] = []

        self.prompt_label = Label(name="selector-prompt", label="")
        self.search_entry = Entry(
            name="selector-search",
            h_expand=True,
        )
        self.search_entry.connect("key-press-event", self._on_key_press)

        self.arrow_previous = Label(name="selector-arrow", label="↑")
        self.arrow_next = Label(name="selector-arrow", label="↓")

        header = Box(
            orientation="h",
            spacing=8,
            h_expand=True,
            h_align="fill",
        )
        header.add(self.prompt_label)
        header.add(self.search_entry)

        self.grid = Box(
            name="selector-list",
            orientation="h",
            spacing=6,
            h_expand=True,
            h_align="fill",
        )
        arrows = Box(orientation="v", v_align="fill")
        arrows.add(self.arrow_previous)
        arrows.add(Box(v_expand=True))
        arrows.add(self.arrow_next)

        body = Box(orientation="h", spacing=4, h_expand=True)
        body.add(self.grid)
        body.add(arrows)

        self.add(header)
        self.add(body)
        self.set_size_request(width, -1)

        self.service.connect("page-changed", lambda *_: self._render())
        self.service.connect(
            "notify::prompt",
            lambda *_: self.prompt_label.set_label(self.service.prompt),
        )
        GLib.idle_add(self._focus_entry)

    def _focus_entry(self) -> bool:
        try:
            self.search_entry.grab_focus()
            self.search_entry.set_position(-1)
        except (AttributeError, RuntimeError):
            logger.debug("selector search focus failed", exc_info=True)
        return False

    def _on_key_press(self, _entry: Entry, event) -> bool:
        key = key_press_from_gdk(event)
        if key is None:
            return False
        if key.key in _MODIFIER_KEYS:
            return False
        self.service.feed_key(key)
        # the entry only mirrors the engine's query
        return True

    def _ensure_cells(self, layout: ResolvedLayout) -> None:
        if layout == self._layout:
            return
        self._layout = layout
        for child in list(self.grid.get_children()):
            self.grid.remove(child)
        self._cells = []

        columns = layout.capacity if layout.horizontal else layout.columns
        rows = 1 if layout.horizontal else layout.rows
        for _col in range(columns):
            column = Box(orientation="v", spacing=2, h_expand=True, h_align="fill")
            for _row in range(rows):
                cell = Label(
                    name="selector-item",
                    label="",
                    ellipsization="end",
                    h_expand=True,
                    h_align="start",
                )
                column.add(cell)
                self._cells.append(cell)
            self.grid.add(column)

        self.arrow_previous.set_label("←" if layout.horizontal else "↑")
        self.arrow_next.set_label("→" if layout.horizontal else "↓")
        self.grid.show_all()

    def _render(self) -> None:
        engine = self.service.engine
        if engine is not None:
            self._ensure_cells(engine.layout)
        page = self.service.page

        for position, cell in enumerate(self._cells):
            style = cell.get_style_context()
            style.remove_class("selector-item-selected")
            if position < len(page.rows):
                row = page.rows[position]
                cell.set_label(row.text)
                if row.highlighted:
                    style.add_class("selector-item-selected")
            else:
                cell.set_label("")

        self.arrow_previous.set_visible(page.has_previous)
        self.arrow_next.set_visible(page.has_next)
        self._sync_entry()

    def _sync_entry(self) -> None:
        desired = self.service.query
        try:
            if self.search_entry.get_text() != desired:
                self.search_entry.set_text(desired)
            self.search_entry.set_position(self.service.cursor)
        except RuntimeError:
            logger.debug("failed to sync selector query", exc_info=True)
