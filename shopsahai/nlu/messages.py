"""
User-facing messages, in English and Malayalam.

Every message the engine speaks or displays comes from this table, so a
turn always answers in the active locale. Templates use str.format
placeholders; amounts are passed already formatted.
"""

from shopsahai.models.command import Locale


MESSAGES: dict[str, dict[Locale, str]] = {
    # -------------------------------------------------------------------------
    # One-shot commands
    # -------------------------------------------------------------------------
    "usage_hint": {
        Locale.EN: (
            "I can help you add income, expenses, purchases, and borrowing. "
            "Try commands like 'Add income 500' or 'Expense 200 for food'."
        ),
        Locale.ML: (
            "വരുമാനം, ചെലവുകൾ, വാങ്ങലുകൾ, കടം എന്നിവ ചേർക്കാൻ ഞാൻ സഹായിക്കാം. "
            "'500 വരുമാനം ചേർക്കുക' അല്ലെങ്കിൽ 'ഭക്ഷണത്തിന് 200 ചെലവ്' പോലെ പറയുക."
        ),
    },
    "income_saved": {
        Locale.EN: "Successfully added income of ₹{amount} in {category} category.",
        Locale.ML: "₹{amount} വരുമാനം {category} വിഭാഗത്തിൽ വിജയകരമായി ചേർത്തു.",
    },
    "expense_saved": {
        Locale.EN: "Successfully added expense of ₹{amount} in {category} category.",
        Locale.ML: "₹{amount} ചെലവ് {category} വിഭാഗത്തിൽ വിജയകരമായി ചേർത്തു.",
    },
    "purchase_saved": {
        Locale.EN: "Successfully recorded purchase of ₹{amount} from {name}.",
        Locale.ML: "{name} ൽ നിന്ന് ₹{amount} വാങ്ങൽ വിജയകരമായി രേഖപ്പെടുത്തി.",
    },
    "borrow_saved": {
        Locale.EN: "Successfully recorded ₹{amount} borrowed by {name}.",
        Locale.ML: "{name} കടം വാങ്ങിയ ₹{amount} വിജയകരമായി രേഖപ്പെടുത്തി.",
    },
    "income_amount_missing": {
        Locale.EN: "Please specify the amount. Try: 'Add income 500 rupees'",
        Locale.ML: "തുക വ്യക്തമാക്കുക. ശ്രമിക്കുക: '500 രൂപ വരുമാനം ചേർക്കുക'",
    },
    "expense_amount_missing": {
        Locale.EN: "Please specify the amount. Try: 'Add expense 200 for travel'",
        Locale.ML: "തുക വ്യക്തമാക്കുക. ശ്രമിക്കുക: 'യാത്രയ്ക്ക് 200 ചെലവ് ചേർക്കുക'",
    },
    "purchase_amount_missing": {
        Locale.EN: "Please specify the amount. Try: 'Purchase 1000 from supplier ABC'",
        Locale.ML: "തുക വ്യക്തമാക്കുക. ശ്രമിക്കുക: 'ABC വിതരണക്കാരനിൽ നിന്ന് 1000 വാങ്ങൽ'",
    },
    "borrow_amount_missing": {
        Locale.EN: "Please specify the amount. Try: 'John borrowed 500 rupees'",
        Locale.ML: "തുക വ്യക്തമാക്കുക. ശ്രമിക്കുക: 'ജോൺ 500 രൂപ കടം വാങ്ങി'",
    },
    "purchase_name_missing": {
        Locale.EN: "I couldn't recognise the supplier name. Please say it again, like 'Purchase 1000 from Kerala Stores'.",
        Locale.ML: "വിതരണക്കാരന്റെ പേര് മനസ്സിലായില്ല. ദയവായി വീണ്ടും പറയുക, ഉദാ: 'കേരള സ്റ്റോഴ്സിൽ നിന്ന് 1000 വാങ്ങൽ'.",
    },
    "borrow_name_missing": {
        Locale.EN: "I couldn't recognise the borrower's name. Please say it again, like 'John borrowed 500 rupees'.",
        Locale.ML: "കടം വാങ്ങിയ ആളുടെ പേര് മനസ്സിലായില്ല. ദയവായി വീണ്ടും പറയുക, ഉദാ: 'ജോൺ 500 രൂപ കടം വാങ്ങി'.",
    },
    "save_failed": {
        Locale.EN: "Could not save the entry: {error}",
        Locale.ML: "എൻട്രി സേവ് ചെയ്യാൻ കഴിഞ്ഞില്ല: {error}",
    },
    "partial_saved": {
        Locale.EN: "{saved} But the matching expense entry could not be saved: {error}",
        Locale.ML: "{saved} പക്ഷേ അനുബന്ധ ചെലവ് എൻട്രി സേവ് ചെയ്യാൻ കഴിഞ്ഞില്ല: {error}",
    },
    "error": {
        Locale.EN: "Sorry, there was an error processing your request. Please try again.",
        Locale.ML: "ക്ഷമിക്കണം, നിങ്ങളുടെ അഭ്യർത്ഥന പ്രോസസ്സ് ചെയ്യുന്നതിൽ പിശക്. ദയവായി വീണ്ടും ശ്രമിക്കുക.",
    },
    "recognition_error": {
        Locale.EN: "Sorry, I couldn't understand. Please try again.",
        Locale.ML: "ക്ഷമിക്കണം, മനസ്സിലായില്ല. ദയവായി വീണ്ടും ശ്രമിക്കുക.",
    },

    # -------------------------------------------------------------------------
    # Guided dialogues
    # -------------------------------------------------------------------------
    "ask_purchase_name": {
        Locale.EN: "New purchase. What is the supplier's name?",
        Locale.ML: "പുതിയ വാങ്ങൽ. വിതരണക്കാരന്റെ പേര് എന്താണ്?",
    },
    "ask_borrow_name": {
        Locale.EN: "New borrow record. Who is borrowing?",
        Locale.ML: "പുതിയ കടം രേഖ. ആരാണ് കടം വാങ്ങുന്നത്?",
    },
    "ask_purchase_amount": {
        Locale.EN: "What is the total purchase amount?",
        Locale.ML: "മൊത്തം വാങ്ങൽ തുക എത്രയാണ്?",
    },
    "ask_borrow_amount": {
        Locale.EN: "How much was given?",
        Locale.ML: "എത്ര രൂപ നൽകി?",
    },
    "ask_purchase_paid": {
        Locale.EN: "How much has been paid to the supplier? Say 'nothing' if unpaid.",
        Locale.ML: "വിതരണക്കാരന് എത്ര കൊടുത്തു? ഒന്നും കൊടുത്തില്ലെങ്കിൽ 'ഒന്നുമില്ല' എന്ന് പറയുക.",
    },
    "ask_borrow_paid": {
        Locale.EN: "How much has been paid back? Say 'nothing' if none.",
        Locale.ML: "എത്ര തിരികെ കിട്ടി? ഒന്നും കിട്ടിയില്ലെങ്കിൽ 'ഒന്നുമില്ല' എന്ന് പറയുക.",
    },
    "confirm_purchase": {
        Locale.EN: "Purchase from {name}, total ₹{amount}, paid ₹{paid}. Shall I save it? Say yes or no.",
        Locale.ML: "{name} ൽ നിന്ന് വാങ്ങൽ, മൊത്തം ₹{amount}, കൊടുത്തത് ₹{paid}. സേവ് ചെയ്യട്ടെ? ശരി അല്ലെങ്കിൽ വേണ്ട എന്ന് പറയുക.",
    },
    "confirm_borrow": {
        Locale.EN: "{name} borrowed ₹{amount}, paid back ₹{paid}. Shall I save it? Say yes or no.",
        Locale.ML: "{name} ₹{amount} കടം വാങ്ങി, തിരികെ നൽകിയത് ₹{paid}. സേവ് ചെയ്യട്ടെ? ശരി അല്ലെങ്കിൽ വേണ്ട എന്ന് പറയുക.",
    },
    "ask_yes_no": {
        Locale.EN: "Please say yes to save, or no to change the amount.",
        Locale.ML: "സേവ് ചെയ്യാൻ 'ശരി' എന്നും തുക മാറ്റാൻ 'വേണ്ട' എന്നും പറയുക.",
    },
    "name_rejected": {
        Locale.EN: "That doesn't sound like a name. Please say the name again.",
        Locale.ML: "അതൊരു പേരായി തോന്നുന്നില്ല. ദയവായി പേര് വീണ്ടും പറയുക.",
    },
    "amount_rejected": {
        Locale.EN: "I couldn't get the amount. Please say the amount again.",
        Locale.ML: "തുക മനസ്സിലായില്ല. ദയവായി തുക വീണ്ടും പറയുക.",
    },
    "paid_rejected": {
        Locale.EN: "The paid amount is not valid. It must be a number no more than the total. Please say it again.",
        Locale.ML: "കൊടുത്ത തുക ശരിയല്ല. അത് മൊത്തം തുകയിൽ കൂടരുത്. ദയവായി വീണ്ടും പറയുക.",
    },
    "dialogue_restarted": {
        Locale.EN: "Starting over.",
        Locale.ML: "വീണ്ടും തുടങ്ങുന്നു.",
    },
    "dialogue_cancelled": {
        Locale.EN: "Cancelled. Nothing was saved.",
        Locale.ML: "റദ്ദാക്കി. ഒന്നും സേവ് ചെയ്തില്ല.",
    },
}


def render(key: str, locale: Locale, **values) -> str:
    """Look up a message for the locale and fill in its placeholders."""
    template = MESSAGES[key].get(locale) or MESSAGES[key][Locale.EN]
    return template.format(**values)
