"""
Streamlit Frontend for Shop Sahai Voice

A voice assistant panel for the shop owner. Speech-to-text happens in
the browser or the phone shell; here a text box stands in for the
decoded transcript, so every command can be tried by typing it.

DESIGN PRINCIPLES:
1. Simple, clear interface in English or Malayalam
2. The assistant's reply is always shown, exactly as it is spoken
3. Guided entries show their progress and can be edited before saving
4. Nothing is saved without the owner saying (or pressing) yes
"""

import asyncio

import streamlit as st

from shopsahai.models.command import DialogueKind, DialogueStep, Locale
from shopsahai.orchestrator import create_app_components


# Page configuration
st.set_page_config(
    page_title="Shop Sahai Voice",
    page_icon="🎙️",
    layout="centered",
    initial_sidebar_state="expanded",
)


LABELS = {
    Locale.EN: {
        "title": "Voice Assistant",
        "you_said": "You said:",
        "assistant": "Assistant:",
        "prompt": "Type what you would say",
        "send": "Send",
        "hint": "Try: 'Income 500 from sales' or 'Expense 200 for food' or "
                "'Purchase 1000 from ABC' or 'John borrowed 500'",
        "new_purchase": "New purchase",
        "new_borrow": "New borrow",
        "cancel": "Cancel entry",
        "edit": "Edit before saving",
        "name": "Name",
        "amount": "Amount",
        "paid": "Paid",
        "apply": "Apply changes",
    },
    Locale.ML: {
        "title": "വോയ്സ് അസിസ്റ്റന്റ്",
        "you_said": "നിങ്ങൾ പറഞ്ഞത്:",
        "assistant": "സഹായി:",
        "prompt": "നിങ്ങൾ പറയുന്നത് ടൈപ്പ് ചെയ്യുക",
        "send": "അയയ്ക്കുക",
        "hint": "ശ്രമിക്കുക: 'വിൽപനയിൽ നിന്ന് 500 വരുമാനം' അല്ലെങ്കിൽ "
                "'ഭക്ഷണത്തിന് 200 ചെലവ്' അല്ലെങ്കിൽ 'ABC യിൽ നിന്ന് 1000 വാങ്ങൽ'",
        "new_purchase": "പുതിയ വാങ്ങൽ",
        "new_borrow": "പുതിയ കടം",
        "cancel": "റദ്ദാക്കുക",
        "edit": "സേവ് ചെയ്യുന്നതിന് മുമ്പ് മാറ്റുക",
        "name": "പേര്",
        "amount": "തുക",
        "paid": "കൊടുത്തത്",
        "apply": "മാറ്റങ്ങൾ പ്രയോഗിക്കുക",
    },
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def main():
    """Main application entry point."""
    controller, _ = get_components()

    # Sidebar: language and settings
    st.sidebar.title("🎙️ Shop Sahai")
    st.sidebar.markdown("---")
    language = st.sidebar.radio(
        "Language / ഭാഷ",
        ["English", "മലയാളം"],
        index=0 if controller.locale is Locale.EN else 1,
    )
    locale = Locale.EN if language == "English" else Locale.ML
    if locale is not controller.locale:
        controller.set_locale(locale)

    page = st.sidebar.radio("Navigate to:", ["🎙️ Assistant", "⚙️ Settings"], index=0)

    if page == "🎙️ Assistant":
        render_assistant_page(controller, locale)
    else:
        render_settings_page()


def render_assistant_page(controller, locale: Locale):
    """Render the voice assistant panel."""
    labels = LABELS[locale]
    st.title(f"🎙️ {labels['title']}")

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button(labels["new_purchase"]):
            run_async(controller.start_dialogue(DialogueKind.PURCHASE))
    with col2:
        if st.button(labels["new_borrow"]):
            run_async(controller.start_dialogue(DialogueKind.BORROW))
    with col3:
        if st.button(labels["cancel"], disabled=controller.active_dialogue is None):
            run_async(controller.cancel_dialogue())

    with st.form("utterance_form", clear_on_submit=True):
        utterance = st.text_input(labels["prompt"])
        submitted = st.form_submit_button(labels["send"])

    if submitted and utterance.strip():
        st.session_state["last_utterance"] = utterance
        run_async(controller.handle(utterance))

    if st.session_state.get("last_utterance"):
        st.markdown(f"**{labels['you_said']}** {st.session_state['last_utterance']}")

    result = controller.last_result
    if result is not None:
        st.markdown(f"**{labels['assistant']}**")
        if result.success:
            st.success(result.message)
        else:
            st.error(result.message)
        for warning in result.warnings:
            st.warning(warning)
        if result.debug:
            with st.expander("Debug"):
                st.code(result.debug)

    dialogue = controller.active_dialogue
    if dialogue is not None and dialogue.step == DialogueStep.CONFIRM:
        with st.expander(labels["edit"]):
            with st.form("edit_form"):
                name = st.text_input(labels["name"], value=dialogue.state.entity_name)
                amount = st.text_input(labels["amount"], value=dialogue.state.amount)
                paid = st.text_input(labels["paid"], value=dialogue.state.paid)
                if st.form_submit_button(labels["apply"]):
                    controller.last_result = dialogue.edit(
                        locale, entity_name=name, amount=amount, paid=paid
                    )
                    st.rerun()

    st.caption(labels["hint"])


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    # Check settings sections
    from shopsahai.config import validate_all_settings

    status = validate_all_settings()

    sections = [
        ("Voice", "voice"),
        ("Google Sheets (Storage)", "google_sheets"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
