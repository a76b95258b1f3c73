from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union


class ConfigurationError(ValueError):
    """Raised for layouts or settings a session cannot start with."""


@dataclass(frozen=True)
class Candidate:
    index: int
    text: str
    fields: Tuple[str, ...] = ()

    def search_fields(self) -> Tuple[str, ...]:
        return self.fields or (self.text,)


class CandidateSet(Sequence[Candidate]):
    """Ordered, read-only candidates of one session."""

    def __init__(self, candidates: Iterable[Candidate] = ()):
        self._items: Tuple[Candidate, ...] = tuple(candidates)
        for position, candidate in enumerate(self._items):
            if candidate.index != position:
                raise ValueError(
                    f"candidate {candidate.text!r} has index {candidate.index}, expected {position}"
                )

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "CandidateSet":
        return cls(Candidate(index, line) for index, line in enumerate(lines))

    @classmethod
    def from_fields(
        cls,
        rows: Iterable[Tuple[str, Sequence[str]]],
    ) -> "CandidateSet":
        return cls(
            Candidate(index, text, tuple(values))
            for index, (text, values) in enumerate(rows)
        )

    def __getitem__(self, position):
        return self._items[position]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self._items)


@dataclass(frozen=True)
class KeyPress:
    """A normalized key event, named after GDK keyval names."""

    key: str
    text: str = ""
    shift: bool = False
    control: bool = False
    alt: bool = False
    super: bool = False


@dataclass(frozen=True)
class PasteDelivery:
    payload: Union[str, bytes, None]


Event = Union[KeyPress, PasteDelivery]


class OutcomeKind(Enum):
    SELECTED = "selected"
    CANCELLED = "cancelled"
    CUSTOM_INPUT = "custom-input"
    NEXT_LIST = "next-list"
    DELETE_ENTRY = "delete-entry"
    QUICK_JUMP = "quick-jump"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    index: Optional[int] = None
    shift: bool = False
    text: Optional[str] = None

    @classmethod
    def selected(cls, index: int, shift: bool = False) -> "Outcome":
        return cls(OutcomeKind.SELECTED, index=index, shift=shift)

    @classmethod
    def cancelled(cls) -> "Outcome":
        return cls(OutcomeKind.CANCELLED)

    @classmethod
    def custom_input(cls, text: str, shift: bool = False) -> "Outcome":
        return cls(OutcomeKind.CUSTOM_INPUT, shift=shift, text=text)

    @classmethod
    def next_list(cls) -> "Outcome":
        return cls(OutcomeKind.NEXT_LIST, index=0)

    @classmethod
    def delete_entry(cls, index: int) -> "Outcome":
        return cls(OutcomeKind.DELETE_ENTRY, index=index)

    @classmethod
    def quick_jump(cls, target: int) -> "Outcome":
        return cls(OutcomeKind.QUICK_JUMP, index=target)


@dataclass(frozen=True)
class SessionResult:
    outcome: Outcome
    query: str

    @property
    def kind(self) -> OutcomeKind:
        return self.outcome.kind

    @property
    def index(self) -> Optional[int]:
        return self.outcome.index


@dataclass(frozen=True)
class PageRow:
    position: int
    index: int
    text: str
    highlighted: bool


@dataclass
class PageView:
    offset: int
    capacity: int
    rows: List[PageRow] = field(default_factory=list)
    has_previous: bool = False
    has_next: bool = False

    @classmethod
    def empty(cls, capacity: int = 1) -> "PageView":
        return cls(offset=0, capacity=capacity)
