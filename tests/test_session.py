"""Tests for the session controller and its timers."""

import asyncio

import pytest

from shopsahai.models.command import DialogueKind, DialogueStep, Locale, Outcome
from shopsahai.nlu.messages import render
from shopsahai.session import OneShotTimer


class TestRouting:
    """Where an utterance goes."""

    @pytest.mark.asyncio
    async def test_one_shot_command(self, controller, speaker, storage):
        """Test that a plain command is classified and the reply spoken."""
        result = await controller.handle("income 500 from sales")

        assert result.outcome == Outcome.SAVED
        assert speaker.last == result.message
        assert controller.active_dialogue is None
        assert storage.transactions[0].amount == 500

    @pytest.mark.asyncio
    async def test_starter_begins_dialogue(self, controller, speaker):
        """Test that 'new purchase' starts the purchase dialogue."""
        result = await controller.handle("new purchase")

        assert controller.active_kind == DialogueKind.PURCHASE
        assert controller.active_dialogue.step == DialogueStep.ASK_ENTITY
        assert result.message == render("ask_purchase_name", Locale.EN)
        assert speaker.last == result.message

    @pytest.mark.asyncio
    async def test_malayalam_starter(self, make_controller, speaker):
        """Test a Malayalam borrow starter."""
        controller = make_controller(speaker, locale=Locale.ML)
        result = await controller.handle("പുതിയ കടം")

        assert controller.active_kind == DialogueKind.BORROW
        assert result.message == render("ask_borrow_name", Locale.ML)

    @pytest.mark.asyncio
    async def test_starter_with_amount_is_one_shot(self, controller, storage):
        """Test that a starter phrase carrying an amount is a one-shot command."""
        result = await controller.handle("add purchase 1000 from Kerala Stores")

        assert controller.active_dialogue is None
        assert result.outcome == Outcome.SAVED
        assert storage.purchases[0].supplier_name == "Kerala Stores"

    @pytest.mark.asyncio
    async def test_only_one_dialogue_at_a_time(self, controller):
        """Test that a second starter is a reply to the active dialogue."""
        await controller.handle("new purchase")
        result = await controller.handle("new borrow")

        assert controller.active_kind == DialogueKind.PURCHASE
        # "new borrow" is made only of command words, so it is not a supplier name
        assert result.outcome == Outcome.INVALID_ENTITY
        assert controller.active_dialogue.step == DialogueStep.ASK_ENTITY

    @pytest.mark.asyncio
    async def test_explicit_start_declined_while_active(self, controller):
        """Test that start_dialogue() does not replace a running dialogue."""
        await controller.start_dialogue(DialogueKind.BORROW)
        result = await controller.start_dialogue(DialogueKind.PURCHASE)

        assert result.success is False
        assert controller.active_kind == DialogueKind.BORROW
        assert result.message == render("ask_borrow_name", Locale.EN)

    @pytest.mark.asyncio
    async def test_borrow_dialogue_end_to_end(self, controller, speaker, storage):
        """Test a full borrow dialogue routed through the controller."""
        for utterance in ("new borrow", "Ramesh", "500", "200"):
            await controller.handle(utterance)
        result = await controller.handle("yes")

        assert result.outcome == Outcome.SAVED
        assert storage.borrows[0].balance == 300
        assert len(storage.transactions) == 1
        # Released once the final reply has been spoken
        assert controller.active_dialogue is None
        assert speaker.last == result.message

    @pytest.mark.asyncio
    async def test_cancel_dialogue(self, controller, storage):
        """Test cancelling by voice and explicitly."""
        await controller.handle("new purchase")
        result = await controller.handle("cancel")
        assert result.outcome == Outcome.CANCELLED
        assert controller.active_dialogue is None

        await controller.start_dialogue(DialogueKind.BORROW)
        result = await controller.cancel_dialogue()
        assert result.outcome == Outcome.CANCELLED
        assert controller.active_dialogue is None
        assert await controller.cancel_dialogue() is None
        assert storage.write_count == 0


class TestLocaleAndErrors:
    """Language switching and the error boundary."""

    @pytest.mark.asyncio
    async def test_set_locale(self, controller, speaker):
        """Test that replies follow the selected locale."""
        controller.set_locale(Locale.ML)
        result = await controller.handle("what is the weather")

        assert result.message == render("usage_hint", Locale.ML)
        assert speaker.spoken[-1][1] == Locale.ML

    @pytest.mark.asyncio
    @pytest.mark.parametrize("locale", [Locale.EN, Locale.ML])
    async def test_recognition_error(self, make_controller, speaker, locale):
        """Test that recognizer errors are spoken in the active locale."""
        controller = make_controller(speaker, locale=locale)
        result = await controller.on_recognition_error("no-speech")

        assert result.success is False
        assert result.outcome == Outcome.ERROR
        assert speaker.last == render("recognition_error", locale)
        assert "no-speech" in result.debug

    @pytest.mark.asyncio
    async def test_turn_failure_is_contained(self, make_controller, speaker):
        """Test that an exception in routing becomes a spoken error."""
        class ExplodingClassifier:
            async def classify(self, *args, **kwargs):
                raise RuntimeError("boom")

        controller = make_controller(speaker, classifier_override=ExplodingClassifier())
        result = await controller.handle("income 500")

        assert result.outcome == Outcome.ERROR
        assert speaker.last == render("error", Locale.EN)
        assert controller.is_busy is False


class TestSpeakingAndListening:
    """Microphone discipline around spoken replies."""

    @pytest.mark.asyncio
    async def test_transcripts_ignored_while_speaking(self, make_controller, held_speaker):
        """Test that the assistant does not hear itself."""
        speaker = held_speaker
        controller = make_controller(speaker)

        await controller.handle("new purchase")
        assert controller.is_speaking

        controller.on_transcript("Kerala Stores")
        await asyncio.sleep(0.05)
        assert controller.active_dialogue.step == DialogueStep.ASK_ENTITY

        speaker.finish()
        assert not controller.is_speaking

    @pytest.mark.asyncio
    async def test_listening_resumes_after_cooldown(self, controller, listener):
        """Test that the microphone reopens only after the cool-down."""
        await controller.handle("income 500 from sales")
        assert listener.stop_count == 1
        assert listener.start_count == 0

        await asyncio.sleep(0.05)
        assert listener.start_count == 1

    @pytest.mark.asyncio
    async def test_debounce_dispatches_latest_text(self, controller, storage):
        """Test that only the settled transcript is handled."""
        controller.on_transcript("income")
        controller.on_transcript("income 5")
        controller.on_transcript("income 500 from sales")

        await asyncio.sleep(0.05)
        result = await controller.wait_dispatched()

        assert result.outcome == Outcome.SAVED
        assert len(storage.transactions) == 1
        assert storage.transactions[0].amount == 500

    @pytest.mark.asyncio
    async def test_blank_transcript_is_ignored(self, controller):
        """Test that empty deliveries start nothing."""
        controller.on_transcript("   ")
        assert not controller.scheduler.debounce_timer.pending
        assert await controller.wait_dispatched() is None

    @pytest.mark.asyncio
    async def test_new_transcript_cancels_pending_listen(self, controller):
        """Test that an utterance cancels the scheduled auto-listen."""
        controller.begin_listening()
        controller.scheduler.schedule_listen(lambda: None, delay_ms=1000)
        assert controller.scheduler.listen_timer.pending

        controller.on_transcript("income 500")
        assert not controller.scheduler.listen_timer.pending
        controller.close()

    @pytest.mark.asyncio
    async def test_resume_grace_delays_listening(self, controller, listener):
        """Test that listening waits out the resume grace period."""
        controller.notify_resumed()
        controller.begin_listening()

        await asyncio.sleep(0.05)
        assert listener.start_count == 0

        await asyncio.sleep(0.2)
        assert listener.start_count == 1

    @pytest.mark.asyncio
    async def test_close_stops_everything(self, controller, listener):
        """Test that close() cancels timers and the microphone."""
        controller.begin_listening()
        controller.close()

        await asyncio.sleep(0.03)
        assert listener.start_count == 0
        assert listener.stop_count == 1


class TestOneShotTimer:
    """The restartable timer under the scheduler."""

    @pytest.mark.asyncio
    async def test_restart_drops_pending_callback(self):
        """Test that restarting replaces the previous callback."""
        fired = []
        timer = OneShotTimer("test")
        timer.start(20, fired.append, "first")
        timer.start(20, fired.append, "second")

        await asyncio.sleep(0.05)
        assert fired == ["second"]
        assert not timer.pending

    @pytest.mark.asyncio
    async def test_cancel(self):
        """Test that a cancelled timer never fires."""
        fired = []
        timer = OneShotTimer("test")
        timer.start(10, fired.append, "x")
        timer.cancel()

        await asyncio.sleep(0.03)
        assert fired == []
