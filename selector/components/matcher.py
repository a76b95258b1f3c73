from __future__ import annotations

from typing import Callable, Generic, Optional, Protocol, Sequence, TypeVar

from selector.components.selection_models import Candidate
from selector.components.tokenizer import comparison_key


ContextT = TypeVar("ContextT")
ContextT_contra = TypeVar("ContextT_contra", contravariant=True)

FieldResolver = Callable[[Candidate, ContextT], Sequence[Optional[str]]]


class Matcher(Protocol[ContextT_contra]):
    """Decides whether a candidate satisfies every query token.

    ``context`` is whatever the caller handed the session; the engine only
    passes it through.
    """

    def matches(
        self,
        tokens: Sequence[str],
        candidate: Candidate,
        context: ContextT_contra,
    ) -> bool: ...


class TokenMatcher:
    """Every token must occur in the candidate's primary text."""

    def matches(self, tokens: Sequence[str], candidate: Candidate, context: object = None) -> bool:
        if not tokens:
            return True
        key = comparison_key(candidate.text)
        for token in tokens:
            if token not in key:
                return False
        return True


class FieldMatcher(Generic[ContextT]):
    """Every token must occur in at least one of the candidate's fields.

    Fields come from ``resolver(candidate, context)`` when given, otherwise
    from ``candidate.search_fields()``. Empty fields never match.
    """

    def __init__(self, resolver: Optional[FieldResolver] = None):
        self._resolver = resolver

    def _fields(self, candidate: Candidate, context: ContextT) -> Sequence[Optional[str]]:
        if self._resolver is None:
            return candidate.search_fields()
        return self._resolver(candidate, context)

    def matches(self, tokens: Sequence[str], candidate: Candidate, context: ContextT) -> bool:
        if not tokens:
            return True
        keys = [comparison_key(value) for value in self._fields(candidate, context) if value]
        keys = [key for key in keys if key]
        for token in tokens:
            if not any(token in key for key in keys):
                return False
        return True
