from __future__ import annotations

import unicodedata
from typing import List, Optional


def comparison_key(value: Optional[str]) -> str:
    """Case-folded, accent-insensitive key used on both sides of a match."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return stripped.casefold()


def tokenize(query: Optional[str]) -> List[str]:
    if not query:
        return []
    # literal spaces only; tabs stay inside a token
    raw_terms = query.split(" ")
    return [key for key in (comparison_key(term) for term in raw_terms if term) if key]
