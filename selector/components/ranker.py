from __future__ import annotations

from operator import itemgetter
from typing import Callable, Iterable, List, Tuple


def levenshtein(source: str, target: str) -> int:
    """Edit distance with unit insert, delete and substitute costs."""
    rows = len(source) + 1
    cols = len(target) + 1
    table: List[List[int]] = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        table[i][0] = i
    for j in range(cols):
        table[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            if source[i - 1] == target[j - 1]:
                table[i][j] = table[i - 1][j - 1]
                continue
            table[i][j] = 1 + min(
                table[i - 1][j - 1],
                table[i - 1][j],
                table[i][j - 1],
            )
    return table[-1][-1]


def stable_sort_by_score(pairs: Iterable[Tuple[int, int]]) -> List[Tuple[int, int]]:
    # sorted() is guaranteed stable: equal scores keep their scan order
    return sorted(pairs, key=itemgetter(1))


def rank(
    query: str,
    matched: Iterable[int],
    text_of: Callable[[int], str],
) -> List[int]:
    """Order matched indices by edit distance between query and their text."""
    folded_query = query.casefold()
    scored = [(index, levenshtein(folded_query, text_of(index).casefold())) for index in matched]
    return [index for index, _score in stable_sort_by_score(scored)]
