"""
Entity Extractor

Pulls a supplier or borrower name out of a noisy utterance such as
"purchase 1000 rupees from Kerala Stores".

Steps:
1. Remove the amount text the resolver matched
2. Remove number words and command/noise words of the locale
3. Whatever is left is the name
4. Nothing left: fuzzy-match the original utterance against reference names
5. Still nothing: the last few non-numeric words, then the whole utterance

The result is never None and never a made-up placeholder. Whether the
name is usable is decided by the validation gate, not here.
"""

from difflib import SequenceMatcher
from typing import Optional, Sequence

from shopsahai.models.command import Locale
from shopsahai.nlu.lexicon import DEFAULT_LEXICON, Lexicon
from shopsahai.nlu.numerals import NumeralResolver, clean_token


def _collapse(text: str) -> str:
    return " ".join(text.split())


class EntityExtractor:
    """Best-effort name extraction with fuzzy correction."""

    def __init__(
        self,
        lexicon: Optional[Lexicon] = None,
        resolver: Optional[NumeralResolver] = None,
        fuzzy_threshold: float = 0.4,
        fallback_tokens: int = 3,
    ):
        """
        Args:
            lexicon: Word knowledge; the shipped lexicon if None
            resolver: Used to recognise number tokens
            fuzzy_threshold: Maximum normalized distance (0-1) for a
                reference name to be accepted
            fallback_tokens: How many trailing words to keep as a last resort
        """
        self._lexicon = lexicon or DEFAULT_LEXICON
        self._resolver = resolver or NumeralResolver(self._lexicon)
        self._threshold = fuzzy_threshold
        self._fallback_tokens = fallback_tokens
        self._noise = {
            locale: {w.casefold() for w in self._lexicon.stopwords.get(locale, ())}
            | {w.casefold() for w in self._lexicon.number_words(locale)}
            for locale in Locale
        }

    def extract(
        self,
        utterance: str,
        amount_matched_text: Optional[str],
        locale: Locale,
        reference_names: Sequence[str] = (),
    ) -> str:
        """Extract a candidate name. Pure: no state is kept between calls."""
        without_amount = _collapse(self._strip_amount(utterance, amount_matched_text))

        candidate = self.clean(without_amount, locale)
        if candidate:
            return candidate

        # Amount and number words never take part in the fuzzy search
        spoken_words = " ".join(
            token for token in without_amount.split()
            if not self._resolver.is_number_token(clean_token(token))
        )
        matched = self.fuzzy_match(spoken_words, reference_names)
        if matched:
            return matched

        trailing = self._trailing_words(without_amount)
        if trailing:
            return trailing

        return utterance.strip()

    def clean(self, text: str, locale: Locale) -> str:
        """Drop digits, number words and noise words; keep original casing."""
        kept = [
            token.strip(".,!?;:'\"()[]₹")
            for token in text.split()
            if not self.is_noise(token, locale)
        ]
        return _collapse(" ".join(kept))

    def is_noise(self, token: str, locale: Locale) -> bool:
        cleaned = clean_token(token)
        if not cleaned:
            return True
        if self._resolver.is_number_token(cleaned):
            return True
        return cleaned in self._noise[locale]

    def fuzzy_match(self, text: str, reference_names: Sequence[str]) -> Optional[str]:
        """
        Best reference name for any same-length word window of text.

        Score is 1 - similarity ratio (0 = identical). The best score must
        be strictly below the acceptance threshold.
        """
        words = [w for w in (clean_token(t) for t in text.split()) if w]
        if not words or not reference_names:
            return None

        best_name = None
        best_score = 1.0
        for name in reference_names:
            target = name.casefold()
            width = max(len(target.split()), 1)
            for start in range(max(len(words) - width + 1, 1)):
                window = " ".join(words[start:start + width])
                score = 1.0 - SequenceMatcher(None, window, target).ratio()
                if score < best_score:
                    best_name, best_score = name, score

        if best_name is not None and best_score < self._threshold:
            return best_name
        return None

    @staticmethod
    def _strip_amount(utterance: str, amount_matched_text: Optional[str]) -> str:
        if amount_matched_text:
            return utterance.replace(amount_matched_text, " ", 1)
        return utterance

    def _trailing_words(self, text: str) -> str:
        words = [
            token.strip(".,!?;:'\"()[]₹")
            for token in text.split()
            if clean_token(token) and not self._resolver.is_number_token(token)
        ]
        return " ".join(words[-self._fallback_tokens:])
