"""
Lexicon - the static word knowledge of the voice engine

Number dictionaries, command keywords, noise words, placeholder names,
reference names and confirmation patterns, for English and Malayalam.

DESIGN DECISION: The lexicon is an immutable object built once and
injected into the resolver, extractor, classifier and dialogues.
Nothing reads word lists from module globals, so tests can swap in an
alternate lexicon without patching.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from shopsahai.models.command import DialogueKind, Locale, NumberScaleEntry


class CategoryRule(BaseModel):
    """Keyword set that selects one income/expense sub-category."""
    model_config = ConfigDict(frozen=True)

    keywords: tuple[str, ...]
    name_en: str
    name_ml: str

    def name(self, locale: Locale) -> str:
        return self.name_ml if locale is Locale.ML else self.name_en


class Lexicon(BaseModel):
    """
    Immutable word knowledge, for both locales.

    Regex sets (affirmative, negative, reset, cancel) are stored as
    pattern strings; consumers compile them once at construction.
    """
    model_config = ConfigDict(frozen=True)

    numbers: tuple[NumberScaleEntry, ...]

    # One-shot routing, checked in this order: income → expense → purchase → borrow
    category_keywords: dict[str, tuple[str, ...]]
    income_categories: tuple[CategoryRule, ...]
    expense_categories: tuple[CategoryRule, ...]
    other_category: CategoryRule
    mirror_categories: dict[DialogueKind, CategoryRule]

    # Name extraction
    stopwords: dict[Locale, tuple[str, ...]]
    placeholder_tokens: tuple[str, ...]
    reference_names: dict[DialogueKind, dict[Locale, tuple[str, ...]]]

    # Dialogues
    dialogue_starters: dict[DialogueKind, tuple[str, ...]]
    affirmative_patterns: tuple[str, ...]
    negative_patterns: tuple[str, ...]
    reset_patterns: tuple[str, ...]
    cancel_patterns: tuple[str, ...]
    nothing_words: tuple[str, ...] = Field(
        default=(),
        description="Replies to 'how much was paid' that mean zero"
    )

    def number_words(self, locale: Optional[Locale] = None) -> set[str]:
        """Single-token number words, optionally for one locale only."""
        return {
            entry.token
            for entry in self.numbers
            if " " not in entry.token and (locale is None or entry.locale is locale)
        }

    def references_for(self, kind: DialogueKind, locale: Locale) -> tuple[str, ...]:
        return self.reference_names.get(kind, {}).get(locale, ())


def _entries(locale: Locale, table: dict[str, int], is_scale: bool) -> list[NumberScaleEntry]:
    return [
        NumberScaleEntry(token=token, locale=locale, value=value, is_scale=is_scale)
        for token, value in table.items()
    ]


_EN_DIGIT_WORDS = {
    "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14, "fifteen": 15,
    "sixteen": 16, "seventeen": 17, "eighteen": 18, "nineteen": 19,
    "twenty": 20, "thirty": 30, "forty": 40, "fifty": 50,
    "sixty": 60, "seventy": 70, "eighty": 80, "ninety": 90,
}

_EN_SCALE_WORDS = {
    "hundred": 100,
    "thousand": 1_000,
    "lakh": 100_000, "lakhs": 100_000, "lac": 100_000, "lacs": 100_000,
    "million": 1_000_000,
    "crore": 10_000_000, "crores": 10_000_000,
    # Two-token phrases, matched by lookahead before their parts
    "hundred thousand": 100_000,
    "ten lakh": 1_000_000,
    "hundred million": 100_000_000,
    "ten crore": 100_000_000,
}

_ML_DIGIT_WORDS = {
    "പൂജ്യം": 0,
    "ഒന്ന്": 1, "ഒരു": 1,
    "രണ്ട്": 2,
    "മൂന്ന്": 3,
    "നാല്": 4,
    "അഞ്ച്": 5,
    "ആറ്": 6,
    "ഏഴ്": 7,
    "എട്ട്": 8,
    "ഒമ്പത്": 9, "ഒൻപത്": 9,
    "പത്ത്": 10,
    "പതിനൊന്ന്": 11,
    "പന്ത്രണ്ട്": 12,
    "പതിമൂന്ന്": 13,
    "പതിനാല്": 14,
    "പതിനഞ്ച്": 15,
    "പതിനാറ്": 16,
    "പതിനേഴ്": 17,
    "പതിനെട്ട്": 18,
    "പത്തൊമ്പത്": 19,
    "ഇരുപത്": 20, "ഇരുപത്തി": 20,
    "മുപ്പത്": 30, "മുപ്പത്തി": 30,
    "നാല്പത്": 40, "നാൽപത്": 40, "നാല്പത്തി": 40,
    "അമ്പത്": 50, "അൻപത്": 50, "അമ്പത്തി": 50,
    "അറുപത്": 60, "അറുപത്തി": 60,
    "എഴുപത്": 70, "എഴുപത്തി": 70,
    "എൺപത്": 80, "എൺപത്തി": 80,
    "തൊണ്ണൂറ്": 90, "തൊണ്ണൂറ്റി": 90,
}

# Malayalam fuses the multiplier into the scale word ("രണ്ടായിരം" = 2000),
# so most entries carry their full value and take an implicit multiplier of 1.
_ML_SCALE_WORDS = {
    "നൂറ്": 100, "നൂറ്റി": 100,
    "ഇരുനൂറ്": 200, "ഇരുനൂറ്റി": 200,
    "മുന്നൂറ്": 300, "മുന്നൂറ്റി": 300,
    "നാനൂറ്": 400, "നാനൂറ്റി": 400,
    "അഞ്ഞൂറ്": 500, "അഞ്ഞൂറ്റി": 500,
    "അറുനൂറ്": 600, "അറുനൂറ്റി": 600,
    "എഴുനൂറ്": 700, "എഴുനൂറ്റി": 700,
    "എണ്ണൂറ്": 800, "എണ്ണൂറ്റി": 800,
    "തൊള്ളായിരം": 900, "തൊള്ളായിരത്തി": 900,
    "ആയിരം": 1_000, "ആയിരത്തി": 1_000,
    "രണ്ടായിരം": 2_000, "രണ്ടായിരത്തി": 2_000,
    "മൂവായിരം": 3_000, "മൂവായിരത്തി": 3_000,
    "നാലായിരം": 4_000, "നാലായിരത്തി": 4_000,
    "അയ്യായിരം": 5_000, "അയ്യായിരത്തി": 5_000,
    "ആറായിരം": 6_000, "ആറായിരത്തി": 6_000,
    "ഏഴായിരം": 7_000, "ഏഴായിരത്തി": 7_000,
    "എണ്ണായിരം": 8_000, "എണ്ണായിരത്തി": 8_000,
    "ഒമ്പതിനായിരം": 9_000, "ഒമ്പതിനായിരത്തി": 9_000,
    "പതിനായിരം": 10_000, "പതിനായിരത്തി": 10_000,
    "ഇരുപതിനായിരം": 20_000,
    "അമ്പതിനായിരം": 50_000, "അൻപതിനായിരം": 50_000,
    "ലക്ഷം": 100_000, "ലക്ഷത്തി": 100_000,
    "പത്ത് ലക്ഷം": 1_000_000,
    "കോടി": 10_000_000,
    "പത്ത് കോടി": 100_000_000,
}


def build_default_lexicon() -> Lexicon:
    """Build the English + Malayalam lexicon shipped with the app."""
    numbers = (
        _entries(Locale.EN, _EN_DIGIT_WORDS, is_scale=False)
        + _entries(Locale.EN, _EN_SCALE_WORDS, is_scale=True)
        + _entries(Locale.ML, _ML_DIGIT_WORDS, is_scale=False)
        + _entries(Locale.ML, _ML_SCALE_WORDS, is_scale=True)
    )

    return Lexicon(
        numbers=tuple(numbers),
        category_keywords={
            "income": ("income", "വരുമാനം"),
            "expense": ("expense", "ചെലവ്"),
            "purchase": ("purchase", "bought", "വാങ്ങൽ"),
            "borrow": ("borrow", "lent", "loan", "കടം"),
        },
        income_categories=(
            CategoryRule(keywords=("sales", "sale", "വിൽപന", "വിൽപ്പന"), name_en="Sales", name_ml="വിൽപന"),
            CategoryRule(keywords=("service", "സേവനം"), name_en="Service", name_ml="സേവനം"),
            CategoryRule(keywords=("investment", "നിക്ഷേപം"), name_en="Investment", name_ml="നിക്ഷേപം"),
        ),
        expense_categories=(
            CategoryRule(keywords=("travel", "യാത്ര"), name_en="Travel", name_ml="യാത്ര"),
            CategoryRule(keywords=("food", "ഭക്ഷണം"), name_en="Food", name_ml="ഭക്ഷണം"),
            CategoryRule(keywords=("utilities", "utility", "യൂട്ടിലിറ്റി"), name_en="Utilities", name_ml="യൂട്ടിലിറ്റി"),
            CategoryRule(keywords=("supplies", "സാധനങ്ങൾ"), name_en="Supplies", name_ml="സാധനങ്ങൾ"),
        ),
        other_category=CategoryRule(keywords=(), name_en="Other", name_ml="മറ്റുള്ളവ"),
        mirror_categories={
            DialogueKind.PURCHASE: CategoryRule(keywords=(), name_en="Purchase", name_ml="വാങ്ങൽ"),
            DialogueKind.BORROW: CategoryRule(keywords=(), name_en="Borrow", name_ml="കടം"),
        },
        stopwords={
            Locale.EN: (
                "add", "record", "new", "entry", "please", "note",
                "income", "expense", "purchase", "purchased", "buy", "bought",
                "borrow", "borrowed", "lend", "lent", "loan", "give", "gave", "given",
                "from", "to", "for", "of", "by", "with", "at", "and", "the", "a", "an",
                "is", "was", "i", "my", "me",
                "rupees", "rupee", "rs", "inr",
                "supplier", "vendor", "person", "borrower", "name",
                "amount", "total", "paid", "pay", "goods", "items",
            ),
            Locale.ML: (
                "ചേർക്കുക", "രേഖപ്പെടുത്തുക", "പുതിയ",
                "വരുമാനം", "ചെലവ്", "വാങ്ങൽ", "വാങ്ങി", "വാങ്ങിയ", "കടം",
                "കൊടുത്തു", "കൊടുക്കുക", "നൽകി",
                "നിന്ന്", "നിന്നും", "ൽ", "ക്ക്", "ആയി",
                "രൂപ", "രൂപയ്ക്ക്",
                "വിതരണക്കാരൻ", "വിതരണക്കാരനിൽ", "വ്യക്തി", "പേര്", "തുക",
            ),
        },
        placeholder_tokens=(
            "unknown", "blank", "none", "nobody", "null", "someone", "somebody",
            "supplier", "vendor", "person", "borrower", "customer", "name",
            "അജ്ഞാത", "അജ്ഞാതം", "അജ്ഞാതൻ", "ആരോ", "ആരുമില്ല",
            "വിതരണക്കാരൻ", "വ്യക്തി", "പേര്",
        ),
        reference_names={
            DialogueKind.PURCHASE: {
                Locale.EN: (
                    "Ramesh Traders", "Kerala Stores", "Anand Agencies",
                    "Sree Krishna Wholesale", "Malabar Suppliers", "Lakshmi Enterprises",
                ),
                Locale.ML: (
                    "രമേശ് ട്രേഡേഴ്സ്", "കേരള സ്റ്റോഴ്സ്", "ആനന്ദ് ഏജൻസീസ്",
                    "ശ്രീകൃഷ്ണ ഹോൾസെയിൽ", "മലബാർ സപ്ലയേഴ്സ്",
                ),
            },
            DialogueKind.BORROW: {
                Locale.EN: (
                    "Ramesh", "Suresh", "John", "Anil", "Biju", "Priya", "Lakshmi", "Joseph",
                ),
                Locale.ML: (
                    "രമേശ്", "സുരേഷ്", "ജോൺ", "അനിൽ", "ബിജു", "പ്രിയ", "ലക്ഷ്മി", "ജോസഫ്",
                ),
            },
        },
        dialogue_starters={
            DialogueKind.PURCHASE: (
                "new purchase", "add purchase", "start purchase", "purchase entry",
                "പുതിയ വാങ്ങൽ", "വാങ്ങൽ ചേർക്കുക",
            ),
            DialogueKind.BORROW: (
                "new borrow", "add borrow", "start borrow", "borrow entry",
                "പുതിയ കടം", "കടം ചേർക്കുക",
            ),
        },
        affirmative_patterns=(
            r"\b(yes|yeah|yep|save|confirm|ok|okay|correct|sure)\b",
            r"(ശരി|അതെ|ഉവ്വ്|സേവ്|സ്ഥിരീകരിക്കുക|ഓക്കെ)",
        ),
        negative_patterns=(
            r"\b(no|nope|change|back|wrong|edit)\b",
            r"(വേണ്ട|ഇല്ല|മാറ്റുക|മാറ്റം|തിരികെ|തെറ്റ്)",
        ),
        reset_patterns=(
            r"\b(reset|restart|start over|start again)\b",
            r"(വീണ്ടും തുടങ്ങുക|റീസെറ്റ്|ആദ്യം മുതൽ)",
        ),
        cancel_patterns=(
            r"\b(cancel|stop|exit|quit|abort)\b",
            r"(റദ്ദാക്കുക|നിർത്തുക|ക്യാൻസൽ)",
        ),
        nothing_words=(
            "nothing", "none", "zero", "nil", "not paid", "no payment",
            "ഒന്നുമില്ല", "പൂജ്യം", "ഒന്നും തന്നില്ല",
        ),
    )


DEFAULT_LEXICON = build_default_lexicon()
