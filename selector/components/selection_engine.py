from __future__ import annotations

import logging
from typing import Callable, Generic, Iterable, List, Optional, Sequence, Tuple

from selector.components.matcher import ContextT, Matcher, TokenMatcher
from selector.components.pager import Layout, ResolvedLayout, page_count, page_offset
from selector.components.ranker import rank
from selector.components.selection_models import (
    Candidate,
    CandidateSet,
    ConfigurationError,
    Event,
    KeyPress,
    Outcome,
    PageRow,
    PageView,
    PasteDelivery,
    SessionResult,
)
from selector.components.tokenizer import tokenize


logger = logging.getLogger(__name__)


CLIPBOARD = "clipboard"
PRIMARY = "primary"

_ACCEPT_KEYS = {"Return", "KP_Enter", "ISO_Enter"}
_UP_KEYS = {"Up", "KP_Up"}
_DOWN_KEYS = {"Down", "KP_Down"}
_PAGE_UP_KEYS = {"Page_Up", "Prior", "KP_Page_Up", "KP_Prior"}
_PAGE_DOWN_KEYS = {"Page_Down", "Next", "KP_Page_Down", "KP_Next"}
_HOME_KEYS = {"Home", "KP_Home"}
_END_KEYS = {"End", "KP_End"}
_QUICK_JUMP_KEYS = {str(digit): digit - 1 for digit in range(1, 10)}
_MODIFIER_ALIASES = {
    "shift": "shift",
    "control": "control",
    "ctrl": "control",
    "alt": "alt",
    "mod1": "alt",
    "super": "super",
    "mod4": "super",
}

PasteRequester = Callable[[str], None]


def parse_accelerator(combo: str) -> KeyPress:
    """Turn ``"Control+q"`` style strings into a KeyPress pattern."""
    parts = [part.strip() for part in (combo or "").split("+") if part.strip()]
    if not parts:
        raise ConfigurationError(f"empty accelerator: {combo!r}")
    modifiers = {"shift": False, "control": False, "alt": False, "super": False}
    for part in parts[:-1]:
        name = _MODIFIER_ALIASES.get(part.lower())
        if name is None:
            raise ConfigurationError(f"unknown modifier {part!r} in {combo!r}")
        modifiers[name] = True
    return KeyPress(key=parts[-1], **modifiers)


def _accelerator_matches(pattern: KeyPress, key: KeyPress) -> bool:
    if pattern.key.lower() != key.key.lower():
        return False
    if pattern.shift and not key.shift:
        return False
    if pattern.control and not key.control:
        return False
    if pattern.alt and not key.alt:
        return False
    if pattern.super and not key.super:
        return False
    return True


class SelectionEngine(Generic[ContextT]):
    """One keyboard-driven selection session over a fixed candidate set.

    The engine owns the query, the filtered list, the selection and the page
    offset. Hosts either hand it an iterator of events through :meth:`run`,
    or push events one at a time through :meth:`feed` from their own loop.
    Either way the list is refiltered before the next event is read, and the
    session ends with a :class:`SessionResult`.
    """

    def __init__(
        self,
        candidates: Iterable[Candidate],
        matcher: Optional[Matcher] = None,
        context: Optional[ContextT] = None,
        *,
        query: str = "",
        selected_index: Optional[int] = None,
        layout: Optional[Layout] = None,
        sorting: bool = False,
        auto_accept: bool = False,
        cancel_keys: Sequence[KeyPress] = (),
        on_paste_request: Optional[PasteRequester] = None,
    ):
        if isinstance(candidates, CandidateSet):
            self._candidates = candidates
        else:
            self._candidates = CandidateSet(candidates)
        self._matcher = matcher if matcher is not None else TokenMatcher()
        self._context = context
        self._layout = (layout or Layout()).resolve(len(self._candidates))
        self._sorting = sorting
        self._auto_accept = auto_accept
        self._cancel_keys: Tuple[KeyPress, ...] = tuple(cancel_keys)
        self._on_paste_request = on_paste_request

        self._query: str = query or ""
        self._cursor: int = len(self._query)
        self._filtered: List[int] = []
        self._selected: int = 0
        self._offset: int = 0
        self._initial_index = selected_index
        self._located_initial = False
        self._previous_key: Optional[str] = None
        self._result: Optional[SessionResult] = None
        self.dirty = True
        self.needs_redraw = True

    # -- state -------------------------------------------------------------

    @property
    def candidates(self) -> CandidateSet:
        return self._candidates

    @property
    def layout(self) -> ResolvedLayout:
        return self._layout

    @property
    def query(self) -> str:
        return self._query

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def filtered(self) -> Tuple[int, ...]:
        return tuple(self._filtered)

    @property
    def selected_index(self) -> int:
        return self._selected

    @property
    def selected_candidate(self) -> Optional[int]:
        if not self._filtered:
            return None
        return self._filtered[self._selected]

    @property
    def page_offset(self) -> int:
        return self._offset

    @property
    def result(self) -> Optional[SessionResult]:
        return self._result

    @property
    def finished(self) -> bool:
        return self._result is not None

    # -- pipeline ----------------------------------------------------------

    def refilter(self) -> Optional[SessionResult]:
        tokens = tokenize(self._query)
        matched = [
            candidate.index
            for candidate in self._candidates
            if self._matcher.matches(tokens, candidate, self._context)
        ]
        if self._sorting and tokens:
            matched = rank(self._query, matched, self._text_of)
        self._filtered = matched
        logger.debug(
            "selection engine: query=%r matched %d of %d",
            self._query,
            len(matched),
            len(self._candidates),
        )

        if not self._located_initial:
            self._located_initial = True
            self._selected = self._locate_initial()
        self._selected = max(min(self._selected, len(matched) - 1), 0)
        self.dirty = False
        self.needs_redraw = True

        if self._auto_accept and len(matched) == 1:
            return self._finish(Outcome.selected(matched[0]))
        return None

    def _locate_initial(self) -> int:
        if self._initial_index is None:
            return 0
        try:
            return self._filtered.index(self._initial_index)
        except ValueError:
            return 0

    def _text_of(self, index: int) -> str:
        return self._candidates[index].text

    def page(self) -> PageView:
        """Visible window for the renderer; updates the cached offset."""
        capacity = self._layout.capacity
        count = len(self._filtered)
        self._offset = page_offset(count, capacity, self._selected, self._offset)
        self.needs_redraw = False
        if count == 0:
            return PageView.empty(capacity)

        rows = [
            PageRow(
                position=position,
                index=self._filtered[position],
                text=self._text_of(self._filtered[position]),
                highlighted=position == self._selected,
            )
            for position in range(self._offset, min(self._offset + capacity, count))
        ]
        pages = page_count(count, capacity)
        current = self._selected // capacity
        return PageView(
            offset=self._offset,
            capacity=capacity,
            rows=rows,
            has_previous=pages > 1 and current != 0,
            has_next=pages > 1 and current != pages - 1,
        )

    # -- event loop --------------------------------------------------------

    def start(self) -> Optional[SessionResult]:
        if self.dirty and not self.finished:
            self.refilter()
        return self._result

    def feed(self, event: Event) -> Optional[SessionResult]:
        """Apply one event and refilter if the query changed."""
        self.start()
        if self.finished:
            return self._result
        if isinstance(event, PasteDelivery):
            self._deliver_paste(event)
        else:
            self._handle_key(event)
        return self.start()

    def run(self, events: Iterable[Event]) -> SessionResult:
        """Consume events until the session reaches an outcome.

        An exhausted event source ends the session as cancelled.
        """
        source = iter(events)
        while True:
            if self.dirty:
                self.refilter()
            if self._result is not None:
                return self._result
            try:
                event = next(source)
            except StopIteration:
                logger.debug("selection engine: event source closed")
                return self._finish(Outcome.cancelled())
            if isinstance(event, PasteDelivery):
                self._deliver_paste(event)
            else:
                self._handle_key(event)

    def _finish(self, outcome: Outcome) -> SessionResult:
        self._result = SessionResult(outcome=outcome, query=self._query)
        logger.debug(
            "selection engine: finished with %s index=%s",
            outcome.kind.value,
            outcome.index,
        )
        return self._result

    # -- keys --------------------------------------------------------------

    def _handle_key(self, key: KeyPress) -> None:
        try:
            self._dispatch_key(key)
        finally:
            self._previous_key = key.key

    def _dispatch_key(self, key: KeyPress) -> None:
        name = key.key
        lowered = name.lower()

        if (key.control and lowered == "v") or name == "Insert":
            self._request_paste(PRIMARY if key.shift else CLIPBOARD)
            return
        if key.shift and name in ("slash", "question"):
            self._finish(Outcome.next_list())
            return
        if key.shift and name in ("Delete", "KP_Delete"):
            if self._filtered:
                self._finish(Outcome.delete_entry(self._filtered[self._selected]))
            return
        if key.alt and name in _QUICK_JUMP_KEYS:
            self._finish(Outcome.quick_jump(_QUICK_JUMP_KEYS[name]))
            return
        if name in _ACCEPT_KEYS:
            self._accept(key.shift)
            return
        if self._edit(key):
            return
        if name == "Escape" or any(
            _accelerator_matches(pattern, key) for pattern in self._cancel_keys
        ):
            self._finish(Outcome.cancelled())
            return
        self._navigate(key)

    def _accept(self, shift: bool) -> None:
        if self._filtered:
            self._finish(Outcome.selected(self._filtered[self._selected], shift))
        else:
            self._finish(Outcome.custom_input(self._query, shift))

    def _navigate(self, key: KeyPress) -> None:
        name = key.key
        lowered = name.lower()
        count = len(self._filtered)

        if name == "Tab" and not key.shift:
            if count == 1:
                self._finish(Outcome.selected(self._filtered[0]))
                return
            if count == 0 and self._previous_key == "Tab":
                self._finish(Outcome.next_list())
                return
            self._move_down()
            return
        if (
            name in _UP_KEYS
            or name == "ISO_Left_Tab"
            or (name == "Tab" and key.shift)
            or (key.control and lowered == "p")
        ):
            self._move_up()
            return
        if name in _DOWN_KEYS or (key.control and lowered == "n"):
            self._move_down()
            return
        if count == 0:
            return

        last = count - 1
        if name in _PAGE_UP_KEYS:
            step = self._layout.rows if key.control else self._layout.capacity
            self._select(max(self._selected - step, 0))
        elif name in _PAGE_DOWN_KEYS:
            step = self._layout.rows if key.control else self._layout.capacity
            self._select(min(self._selected + step, last))
        elif name in _HOME_KEYS:
            self._select(0)
        elif name in _END_KEYS:
            self._select(last)

    def _move_up(self) -> None:
        count = len(self._filtered)
        if count == 0:
            return
        self._select(count - 1 if self._selected == 0 else self._selected - 1)

    def _move_down(self) -> None:
        count = len(self._filtered)
        if count == 0:
            return
        self._select(self._selected + 1 if self._selected < count - 1 else 0)

    def _select(self, position: int) -> None:
        self._selected = position
        self.needs_redraw = True

    # -- query editing -----------------------------------------------------

    def _edit(self, key: KeyPress) -> bool:
        """Apply a text-editing key; False when the key is not an edit."""
        name = key.key
        lowered = name.lower()
        query, cursor = self._query, self._cursor

        if key.control and not key.alt:
            if lowered == "a":
                return self._move_cursor(0)
            if lowered == "e":
                return self._move_cursor(len(query))
            if lowered == "b":
                return self._move_cursor(cursor - 1)
            if lowered == "f":
                return self._move_cursor(cursor + 1)
            if lowered == "h":
                return self._set_query(query[: max(cursor - 1, 0)] + query[cursor:], max(cursor - 1, 0))
            if lowered == "d":
                return self._set_query(query[:cursor] + query[cursor + 1 :], cursor)
            if lowered == "u":
                return self._set_query(query[cursor:], 0)
            return False

        if name == "BackSpace":
            return self._set_query(query[: max(cursor - 1, 0)] + query[cursor:], max(cursor - 1, 0))
        if name in ("Delete", "KP_Delete"):
            return self._set_query(query[:cursor] + query[cursor + 1 :], cursor)
        if name in ("Left", "KP_Left"):
            return self._move_cursor(cursor - 1)
        if name in ("Right", "KP_Right"):
            return self._move_cursor(cursor + 1)

        if key.alt or key.super or not key.text or not key.text.isprintable():
            return False
        self._insert(key.text)
        return True

    def _move_cursor(self, position: int) -> bool:
        self._cursor = max(0, min(position, len(self._query)))
        self.needs_redraw = True
        return True

    def _set_query(self, query: str, cursor: int) -> bool:
        if query != self._query:
            self._query = query
            self.dirty = True
        self._cursor = max(0, min(cursor, len(query)))
        self.needs_redraw = True
        return True

    def _insert(self, text: str) -> None:
        query, cursor = self._query, self._cursor
        self._set_query(query[:cursor] + text + query[cursor:], cursor + len(text))

    # -- paste -------------------------------------------------------------

    def _request_paste(self, selection: str) -> None:
        if self._on_paste_request is None:
            logger.debug("selection engine: no paste source for %s", selection)
            return
        self._on_paste_request(selection)

    def _deliver_paste(self, event: PasteDelivery) -> None:
        payload = event.payload
        if payload is None:
            logger.debug("selection engine: empty paste delivery ignored")
            return
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8", errors="ignore")
        text = payload.split("\n", 1)[0]
        text = "".join(ch for ch in text if ch.isprintable())
        if not text:
            return
        self._insert(text)
