"""
Dictionary backends - Concrete implementations of the lookup capability.

Each backend answers lookup(prefix) with candidate headwords.
"""

from .function import FunctionDictionary
from .fuzzy import FuzzyWordListDictionary
from .word_list import WordListDictionary

__all__ = [
    "WordListDictionary",
    "FuzzyWordListDictionary",
    "FunctionDictionary",
]
