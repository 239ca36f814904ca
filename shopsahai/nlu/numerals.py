"""
Numeral Resolver

Turns a free-text phrase into an integer amount.

Resolution order (first success wins, so no language detection is needed):
1. Digit scan - the first run of 1-8 digits ("500", "1,500", Malayalam digits)
2. Number words - English and Malayalam words, with scale words
   (hundred, thousand, lakh, crore and equivalents) multiplying the
   running value
3. Unresolved - an explicit "not found", never zero
"""

import re
from typing import Optional

from shopsahai.models.command import ParsedAmount
from shopsahai.nlu.lexicon import DEFAULT_LEXICON, Lexicon


# Up to 8 digits, optionally grouped with commas ("1,50,000")
_DIGIT_RUN = re.compile(r"\d(?:,?\d){0,7}")
_TOKEN = re.compile(r"\S+")
_TOKEN_PUNCTUATION = ".,!?;:'\"()[]₹-"


def clean_token(token: str) -> str:
    """Lower-case a token and strip surrounding punctuation."""
    return token.strip(_TOKEN_PUNCTUATION).casefold()


class NumeralResolver:
    """
    Resolves amounts from digits or number words.

    The resolver is pure: the same phrase always gives the same result.
    """

    def __init__(self, lexicon: Optional[Lexicon] = None):
        lexicon = lexicon or DEFAULT_LEXICON
        self._table = {entry.token.casefold(): entry for entry in lexicon.numbers}

    def is_number_token(self, token: str) -> bool:
        """True for digit runs and single-word dictionary numbers."""
        cleaned = clean_token(token)
        if not cleaned:
            return False
        return cleaned.replace(",", "").isdigit() or cleaned in self._table

    def resolve(self, phrase: str) -> ParsedAmount:
        """
        Resolve a phrase to an amount.

        Returns ParsedAmount.unresolved() when nothing usable was found.
        Callers must treat that as a failure, never as zero.
        """
        if not phrase or not phrase.strip():
            return ParsedAmount.unresolved()

        match = _DIGIT_RUN.search(phrase)
        if match:
            text = match.group()
            return ParsedAmount(value=int(text.replace(",", "")), matched_text=text)

        return self._resolve_words(phrase)

    def _resolve_words(self, phrase: str) -> ParsedAmount:
        spans = [(m.start(), m.end()) for m in _TOKEN.finditer(phrase)]
        tokens = [clean_token(phrase[start:end]) for start, end in spans]

        current = 0
        total = 0
        first_start = None
        last_end = None

        i = 0
        while i < len(tokens):
            entry = None
            width = 1
            # Two-token lookahead for multi-word scale phrases ("hundred thousand")
            if i + 1 < len(tokens):
                entry = self._table.get(f"{tokens[i]} {tokens[i + 1]}")
                if entry is not None:
                    width = 2
            if entry is None:
                entry = self._table.get(tokens[i])

            if entry is None:
                i += 1
                continue

            if first_start is None:
                first_start = spans[i][0]
            last_end = spans[i + width - 1][1]

            if entry.is_scale:
                current = max(current, 1) * entry.value
                total += current
                current = 0
            else:
                current += entry.value

            i += width

        total += current

        if total > 0:
            return ParsedAmount(value=total, matched_text=phrase[first_start:last_end])
        return ParsedAmount.unresolved()
