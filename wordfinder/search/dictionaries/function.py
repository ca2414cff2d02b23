"""
Function Dictionary - Adapts a plain callable to the dictionary capability.

Useful for backends the application already owns (a remote client, a
database query) that should take part in a search without subclassing.
"""

from typing import Callable, Iterable

from wordfinder.search.dictionary import Dictionary, LookupItem


class FunctionDictionary(Dictionary):
    """Delegate lookup(prefix) to func(prefix)."""

    def __init__(self, name: str, func: Callable[[str], Iterable[LookupItem]]):
        self._name = name
        self._func = func

    @property
    def name(self) -> str:
        return self._name

    def lookup(self, prefix: str) -> Iterable[LookupItem]:
        return self._func(prefix) or ()
