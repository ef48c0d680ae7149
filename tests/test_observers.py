"""Unit tests for progress observers and the broadcaster."""

from docsift.core.constants import ProgressEvent
from docsift.pipeline.context import ProcessingContext
from docsift.pipeline.observers import (
    LoggingObserver,
    ProgressBroadcaster,
    ProgressObserver,
    callback_observer,
)


class Recorder(ProgressObserver):
    def __init__(self):
        self.events = []

    def on_started(self, context):
        self.events.append("started")

    def on_completed(self, context):
        self.events.append("completed")

    def on_failed(self, context, error):
        self.events.append(f"failed:{error}")


class Exploding(ProgressObserver):
    def on_started(self, context):
        raise RuntimeError("observer bug")


def make_context(tmp_path):
    return ProcessingContext(source=tmp_path / "doc.pdf")


def test_base_observer_hooks_are_noops(tmp_path):
    observer = ProgressObserver()
    context = make_context(tmp_path)
    observer.on_started(context)
    observer.on_progress(context)
    observer.on_completed(context)
    observer.on_failed(context, ValueError("x"))


def test_broadcast_reaches_every_observer(tmp_path):
    first, second = Recorder(), Recorder()
    broadcaster = ProgressBroadcaster([first, second])
    context = make_context(tmp_path)
    broadcaster.started(context)
    broadcaster.failed(context, ValueError("bad"))
    assert first.events == ["started", "failed:bad"]
    assert second.events == first.events


def test_observer_exception_is_isolated_and_recorded(tmp_path):
    after = Recorder()
    broken = Exploding()
    broadcaster = ProgressBroadcaster([broken, after])
    broadcaster.started(make_context(tmp_path))

    assert after.events == ["started"]
    failures = broadcaster.failures
    assert len(failures) == 1
    assert failures[0].observer is broken
    assert failures[0].event == ProgressEvent.STARTED
    assert str(failures[0].error) == "observer bug"

    broadcaster.clear_failures()
    assert broadcaster.failures == []


def test_callback_observer(tmp_path):
    completed = []
    failed = []
    observer = callback_observer(
        completed.append,
        on_failed=lambda ctx, err: failed.append(err),
    )
    context = make_context(tmp_path)
    broadcaster = ProgressBroadcaster()
    broadcaster.add(observer)
    broadcaster.started(context)
    broadcaster.completed(context)
    broadcaster.failed(context, KeyError("k"))
    assert completed == [context]
    assert len(failed) == 1


def test_logging_observer_does_not_raise(tmp_path):
    broadcaster = ProgressBroadcaster([LoggingObserver()])
    context = make_context(tmp_path)
    broadcaster.started(context)
    broadcaster.progress(context)
    broadcaster.completed(context)
    broadcaster.failed(context, ValueError("x"))
    assert broadcaster.failures == []
