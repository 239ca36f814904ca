"""
Language understanding package.

The classifier lives in shopsahai.nlu.classifier and is imported from
there, since it depends on the ledger writer.
"""

from shopsahai.nlu.entities import EntityExtractor
from shopsahai.nlu.lexicon import DEFAULT_LEXICON, CategoryRule, Lexicon, build_default_lexicon
from shopsahai.nlu.numerals import NumeralResolver, clean_token

__all__ = [
    "CategoryRule",
    "DEFAULT_LEXICON",
    "EntityExtractor",
    "Lexicon",
    "NumeralResolver",
    "build_default_lexicon",
    "clean_token",
]
