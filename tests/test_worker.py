import asyncio

from chanfix.bot.engine import PendingSweep
from chanfix.bot.worker import EventWorker
from chanfix.irc.events import ChannelSynced, PrivateCommand, RawLine


class RecordingEngine:
    def __init__(self, fail_on: type | None = None) -> None:
        self.seen: list[object] = []
        self.raw: list[str] = []
        self.fail_on = fail_on

    async def handle_event(self, event) -> None:
        self.seen.append(event)
        if self.fail_on is not None and isinstance(event, self.fail_on):
            raise RuntimeError("boom")
        await asyncio.sleep(0)

    def handle_raw_line(self, text: str) -> None:
        self.raw.append(text)


async def test_events_processed_in_order():
    engine = RecordingEngine()
    worker = EventWorker(engine, maxsize=10, sweep_interval=60)
    events = [
        PrivateCommand("alice", "help"),
        ChannelSynced("#c"),
        PrivateCommand("bob", "status #c"),
    ]
    worker.start()
    for event in events:
        assert worker.submit(event)
    await asyncio.wait_for(worker.queue.join(), timeout=1)
    await worker.stop()
    assert engine.seen == events


async def test_full_queue_drops_without_blocking():
    worker = EventWorker(RecordingEngine(), maxsize=2, sweep_interval=60)
    assert worker.submit(PrivateCommand("a", "help"))
    assert worker.submit(PrivateCommand("b", "help"))
    assert not worker.submit(PrivateCommand("c", "help"))
    assert worker.dropped == 1


async def test_raw_lines_never_take_queue_slots():
    engine = RecordingEngine()
    worker = EventWorker(engine, maxsize=1, sweep_interval=60)
    for i in range(50):
        assert worker.submit(RawLine(f"line {i}"))
    assert worker.queue.qsize() == 0
    assert worker.submit(PrivateCommand("alice", "fix #c"))
    assert worker.dropped == 0
    assert len(engine.raw) == 50
    assert engine.seen == []

    worker.start()
    await asyncio.wait_for(worker.queue.join(), timeout=1)
    await worker.stop()
    assert engine.seen == [PrivateCommand("alice", "fix #c")]


async def test_raw_lines_flow_while_engine_is_busy():
    release = asyncio.Event()

    class SlowEngine(RecordingEngine):
        async def handle_event(self, event) -> None:
            self.seen.append(event)
            await release.wait()

    engine = SlowEngine()
    worker = EventWorker(engine, maxsize=2, sweep_interval=60)
    worker.start()
    worker.submit(PrivateCommand("alice", "fix #c"))
    await asyncio.sleep(0.01)
    for i in range(20):
        worker.submit(RawLine(f":srv 311 ChanFix u{i} u h * :real"))
    assert worker.submit(PrivateCommand("bob", "status #c"))
    assert worker.dropped == 0
    release.set()
    await asyncio.wait_for(worker.queue.join(), timeout=1)
    await worker.stop()
    assert engine.seen == [
        PrivateCommand("alice", "fix #c"),
        PrivateCommand("bob", "status #c"),
    ]
    assert len(engine.raw) == 20


async def test_handler_failure_does_not_stop_worker():
    engine = RecordingEngine(fail_on=ChannelSynced)
    worker = EventWorker(engine, maxsize=10, sweep_interval=60)
    worker.start()
    worker.submit(ChannelSynced("#c"))
    worker.submit(PrivateCommand("alice", "help"))
    await asyncio.wait_for(worker.queue.join(), timeout=1)
    await worker.stop()
    assert engine.seen == [ChannelSynced("#c"), PrivateCommand("alice", "help")]


async def test_sweep_loop_submits_pending_sweep():
    engine = RecordingEngine()
    worker = EventWorker(engine, maxsize=10, sweep_interval=0.01)
    worker.start()
    await asyncio.sleep(0.1)
    await worker.stop()
    assert any(isinstance(e, PendingSweep) for e in engine.seen)


async def test_stop_is_idempotent():
    worker = EventWorker(RecordingEngine(), maxsize=1, sweep_interval=60)
    await worker.stop()
    worker.start()
    await worker.stop()
    await worker.stop()
    assert not worker.running
