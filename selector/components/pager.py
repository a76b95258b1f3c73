from __future__ import annotations

from dataclasses import dataclass

from selector.components.selection_models import ConfigurationError


def page_offset(count: int, capacity: int, selected: int, previous: int) -> int:
    """First visible position for ``selected``.

    The previous offset is kept while the selection stays on screen, so
    moving inside a page never scrolls.
    """
    if count <= 0:
        return 0
    capacity = max(capacity, 1)
    if previous <= selected < previous + capacity:
        return previous
    return (selected // capacity) * capacity


def page_count(count: int, capacity: int) -> int:
    if count <= 0:
        return 1
    capacity = max(capacity, 1)
    return (count + capacity - 1) // capacity


@dataclass(frozen=True)
class Layout:
    lines: int = 15
    columns: int = 1
    fixed_num_lines: bool = False
    horizontal: bool = False

    def __post_init__(self):
        if self.lines <= 0:
            raise ConfigurationError("layout needs at least one visible line")
        if self.columns <= 0:
            raise ConfigurationError("layout needs at least one visible column")

    def resolve(self, total: int) -> "ResolvedLayout":
        """Rows, columns and capacity for a candidate set of ``total`` items."""
        columns = self.columns
        if self.fixed_num_lines:
            rows = self.lines
            capacity = self.lines * columns
            if total < capacity:
                # drop columns that would stay empty
                columns = max((total + rows - 1) // rows, 1)
                capacity = self.lines * columns
        else:
            capacity = min(self.lines * columns, total)
            rows = min(self.lines, (total + columns - 1) // columns)
        if self.horizontal:
            rows = 1
        return ResolvedLayout(
            rows=max(rows, 1),
            columns=columns,
            capacity=max(capacity, 1),
            horizontal=self.horizontal,
        )


@dataclass(frozen=True)
class ResolvedLayout:
    rows: int
    columns: int
    capacity: int
    horizontal: bool = False
