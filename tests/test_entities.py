"""Tests for entity name extraction."""

from shopsahai.models.command import DialogueKind, Locale
from shopsahai.nlu.entities import EntityExtractor
from shopsahai.nlu.lexicon import DEFAULT_LEXICON


PURCHASE_REFS = DEFAULT_LEXICON.references_for(DialogueKind.PURCHASE, Locale.EN)
BORROW_REFS = DEFAULT_LEXICON.references_for(DialogueKind.BORROW, Locale.EN)


class TestCleaning:
    """Amount, number words and command words are stripped."""

    def test_supplier_after_from(self, extractor):
        """Test the usual 'purchase N from S' phrasing."""
        name = extractor.extract(
            "purchase 1000 rupees from Kerala Stores", "1000", Locale.EN, PURCHASE_REFS
        )
        assert name == "Kerala Stores"

    def test_borrower_before_verb(self, extractor):
        """Test 'X borrowed N rupees'."""
        assert extractor.extract("John borrowed 500 rupees", "500", Locale.EN, BORROW_REFS) == "John"

    def test_number_words_are_removed(self, extractor):
        """Test that spoken amounts do not end up in the name."""
        name = extractor.extract(
            "lent two thousand to Priya", "two thousand", Locale.EN, BORROW_REFS
        )
        assert name == "Priya"

    def test_malayalam_noise_words(self, extractor):
        """Test Malayalam stopwords and currency words."""
        refs = DEFAULT_LEXICON.references_for(DialogueKind.BORROW, Locale.ML)
        assert extractor.extract("രമേശ് 500 രൂപ കടം", "500", Locale.ML, refs) == "രമേശ്"

    def test_casing_is_kept(self, extractor):
        """Test that the name keeps the speaker's casing."""
        name = extractor.extract("purchase 300 from ANAND agencies", "300", Locale.EN, PURCHASE_REFS)
        assert name == "ANAND agencies"


class TestFallbacks:
    """When cleaning leaves nothing."""

    def test_command_only_falls_back_to_trailing_words(self, extractor):
        """Test that 'purchase 1000' yields the leftover command word, not a placeholder."""
        name = extractor.extract("purchase 1000", "1000", Locale.EN, PURCHASE_REFS)
        assert name == "purchase"
        assert "unknown" not in name.lower()

    def test_reference_match_before_trailing_words(self, extractor):
        """Test that leftover words close to a reference name are corrected first."""
        name = extractor.extract("purchase 1000", "1000", Locale.EN, ["Purchase Point"])
        assert name == "Purchase Point"

    def test_whole_utterance_last_resort(self, extractor):
        """Test that a purely numeric utterance returns itself."""
        assert extractor.extract("1000", "1000", Locale.EN, PURCHASE_REFS) == "1000"

    def test_trailing_word_limit(self, resolver):
        """Test that only the configured number of trailing words is kept."""
        extractor = EntityExtractor(DEFAULT_LEXICON, resolver, fallback_tokens=1)
        assert extractor.extract("from the supplier", None, Locale.EN, ()) == "supplier"

    def test_never_empty(self, extractor):
        """Test that the extractor always returns a string."""
        assert isinstance(extractor.extract("", None, Locale.EN, ()), str)

    def test_extract_is_repeatable(self, extractor):
        """Test that extraction keeps no state between calls."""
        args = ("purchase 1000 from Kerala Stores", "1000", Locale.EN, PURCHASE_REFS)
        assert extractor.extract(*args) == extractor.extract(*args)


class TestFuzzyMatch:
    """Approximate matching against reference names."""

    def test_exact_name_in_window(self, extractor):
        """Test that a reference name inside a longer phrase is found."""
        assert extractor.fuzzy_match("borrowed by ramesh", ["Ramesh", "Suresh"]) == "Ramesh"

    def test_misheard_name_is_corrected(self, extractor):
        """Test that a close mis-hearing is corrected."""
        assert extractor.fuzzy_match("rames", ["Ramesh", "Joseph"]) == "Ramesh"

    def test_multi_word_reference(self, extractor):
        """Test matching a two-word reference name."""
        assert extractor.fuzzy_match("kerala store", PURCHASE_REFS) == "Kerala Stores"

    def test_distant_text_is_rejected(self, extractor):
        """Test that nothing is returned above the threshold."""
        assert extractor.fuzzy_match("hello", ["Ramesh"]) is None

    def test_threshold_is_tunable(self, resolver):
        """Test that a strict threshold rejects near matches."""
        strict = EntityExtractor(DEFAULT_LEXICON, resolver, fuzzy_threshold=0.01)
        assert strict.fuzzy_match("rames", ["Ramesh"]) is None

    def test_empty_inputs(self, extractor):
        """Test empty text or references."""
        assert extractor.fuzzy_match("", ["Ramesh"]) is None
        assert extractor.fuzzy_match("ramesh", []) is None

    def test_scale_word_is_not_a_reference_name(self, extractor):
        """Test that 'lakh' is never corrected to the borrower 'Lakshmi'."""
        name = extractor.extract("borrow one lakh", "one lakh", Locale.EN, BORROW_REFS)
        assert name != "Lakshmi"

        refs = DEFAULT_LEXICON.references_for(DialogueKind.BORROW, Locale.ML)
        name = extractor.extract("ഒരു ലക്ഷം കടം", "ഒരു ലക്ഷം", Locale.ML, refs)
        assert name != "ലക്ഷ്മി"
