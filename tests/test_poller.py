import threading

from poller import RepeatingTask


def test_runs_immediately_and_repeats():
    calls = []
    done = threading.Event()

    def tick():
        calls.append(1)
        if len(calls) >= 3:
            done.set()

    task = RepeatingTask(0.01, tick).start()
    assert done.wait(2)
    task.cancel()
    task.join(2)
    assert not task.running
    assert len(calls) >= 3


def test_cancel_stops_future_polls():
    calls = []
    started = threading.Event()

    def tick():
        calls.append(1)
        started.set()

    task = RepeatingTask(60, tick).start()
    assert started.wait(2)
    task.cancel()
    task.join(2)
    assert not task.running
    assert calls == [1]
    task.cancel()  # idempotent


def test_errors_do_not_stop_the_schedule(caplog):
    calls = []
    done = threading.Event()

    def flaky():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError('store unreachable')
        done.set()

    task = RepeatingTask(0.01, flaky, name='flaky').start()
    assert done.wait(2)
    task.cancel()
    task.join(2)
    assert 'flaky: poll failed' in caplog.text
