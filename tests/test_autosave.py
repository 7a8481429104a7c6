"""Tests for debounced and periodic auto-save."""

import asyncio

from prodoc.autosave import AutoSaveScheduler
from prodoc.editor import Editor


class SaveCounter:
    def __init__(self, dirty=True):
        self.dirty = dirty
        self.saves = 0

    def save(self):
        self.saves += 1
        self.dirty = False

    def is_dirty(self):
        return self.dirty


def make_scheduler(counter, debounce=0.02, interval=10.0):
    return AutoSaveScheduler(counter.save, counter.is_dirty,
                             debounce_seconds=debounce, interval_seconds=interval)


class TestDebounce:
    """Saving after edits settle."""

    def test_burst_of_edits_saves_once(self):
        counter = SaveCounter()

        async def scenario():
            scheduler = make_scheduler(counter)
            scheduler.start()
            for _ in range(5):
                scheduler.schedule()
                await asyncio.sleep(0.005)
            assert scheduler.pending
            await asyncio.sleep(0.1)
            assert not scheduler.pending
            scheduler.stop()

        asyncio.run(scenario())
        assert counter.saves == 1

    def test_clean_document_is_not_saved(self):
        counter = SaveCounter(dirty=False)

        async def scenario():
            scheduler = make_scheduler(counter)
            scheduler.start()
            scheduler.schedule()
            await asyncio.sleep(0.08)
            scheduler.stop()

        asyncio.run(scenario())
        assert counter.saves == 0

    def test_schedule_before_start_is_ignored(self):
        counter = SaveCounter()
        scheduler = make_scheduler(counter)

        scheduler.schedule()

        assert not scheduler.pending
        assert counter.saves == 0


class TestInterval:
    """Periodic flush."""

    def test_periodic_save_when_dirty(self):
        counter = SaveCounter()

        async def scenario():
            scheduler = make_scheduler(counter, debounce=10.0, interval=0.02)
            scheduler.start()
            assert scheduler.is_running
            await asyncio.sleep(0.05)
            counter.dirty = True
            await asyncio.sleep(0.05)
            scheduler.stop()
            assert not scheduler.is_running

        asyncio.run(scenario())
        assert counter.saves == 2

    def test_stop_cancels_pending_save(self):
        counter = SaveCounter()

        async def scenario():
            scheduler = make_scheduler(counter, debounce=0.05, interval=10.0)
            scheduler.start()
            scheduler.schedule()
            scheduler.stop()
            await asyncio.sleep(0.1)

        asyncio.run(scenario())
        assert counter.saves == 0


class TestEditorAutoSave:
    def test_typing_triggers_save(self, config, storage, notifier):
        config.autosave.enabled = True
        config.autosave.debounce_seconds = 0.02
        config.autosave.interval_seconds = 10.0
        session = Editor(config, storage=storage, notifier=notifier)
        session.start()

        async def scenario():
            session.start_autosave()
            session.type_text("autosaved")
            await asyncio.sleep(0.1)
            session.stop()

        asyncio.run(scenario())
        assert storage.load().content == "<p>autosaved</p>"
        assert not session.store.is_dirty
