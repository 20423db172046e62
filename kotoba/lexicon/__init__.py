"""Reference lexicon and grammar-pattern catalogs."""

from .grammar import CompiledPattern, GrammarPatternSet
from .index import LexiconIndex
from .reference_io import (
    ReferenceDataError,
    load_default_grammar_patterns,
    load_grammar_patterns,
    load_vocabulary,
)

__all__ = [
    "CompiledPattern",
    "GrammarPatternSet",
    "LexiconIndex",
    "ReferenceDataError",
    "load_default_grammar_patterns",
    "load_grammar_patterns",
    "load_vocabulary",
]
