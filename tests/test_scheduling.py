from notewhisper.scheduling import Debouncer

from conftest import FakeScheduler


def test_bursts_collapse_into_one_scheduled_call():
    scheduler = FakeScheduler()
    fired = []
    debouncer = Debouncer(scheduler, 5.0, lambda: fired.append(True))

    for _ in range(10):
        debouncer.trigger()

    assert len(scheduler.active) == 1
    assert scheduler.active[0].delay == 5.0
    assert debouncer.pending

    scheduler.fire()
    assert fired == [True]
    assert not debouncer.pending


def test_cancel_drops_pending_call():
    scheduler = FakeScheduler()
    fired = []
    debouncer = Debouncer(scheduler, 1.0, lambda: fired.append(True))

    debouncer.trigger()
    debouncer.cancel()
    scheduler.fire()

    assert fired == []
    assert scheduler.active == []
