import threading
from unittest.mock import MagicMock, patch

from leadcrawl.pipeline.control import RunControl
from leadcrawl.pipeline.rate_limiter import RateLimiter


def _control(stopped=False):
    control = MagicMock()
    control.stop_requested = stopped
    control.sleep.return_value = True
    return control


def test_limiter_spaces_slots_and_backs_off():
    control = _control()
    limiter = RateLimiter(1.0, backoff_every=2, backoff_interval=5.0, clock=lambda: 0.0)

    assert limiter.acquire(control)
    assert limiter.acquire(control)
    assert limiter.acquire(control)

    assert [c.args[0] for c in control.sleep.call_args_list] == [1.0, 6.0]
    assert limiter.count == 3


def test_limiter_refuses_when_stopped():
    control = _control(stopped=True)
    limiter = RateLimiter(1.0, clock=lambda: 0.0)

    assert limiter.acquire(control) is False
    assert limiter.count == 0
    control.sleep.assert_not_called()


def test_limiter_reports_interrupted_wait():
    control = _control()
    control.sleep.return_value = False
    limiter = RateLimiter(2.0, clock=lambda: 0.0)

    assert limiter.acquire(control) is True
    assert limiter.acquire(control) is False


@patch("leadcrawl.pipeline.rate_limiter.time.sleep")
def test_limiter_without_control_uses_time_sleep(mock_sleep):
    limiter = RateLimiter(0.5, clock=lambda: 10.0)

    limiter.acquire()
    limiter.acquire()

    mock_sleep.assert_called_once_with(0.5)


def test_stop_wakes_pause_wait():
    control = RunControl(poll_interval=0.01)
    control.pause()
    result = {}

    waiter = threading.Thread(target=lambda: result.update(ok=control.wait_while_paused()))
    waiter.start()
    control.stop()
    waiter.join(timeout=2)

    assert not waiter.is_alive()
    assert result["ok"] is False
    assert control.pause_requested is False


def test_resume_releases_pause_wait():
    control = RunControl(poll_interval=0.01)
    control.pause()
    assert control.pause_requested

    timer = threading.Timer(0.05, control.resume)
    timer.start()

    assert control.wait_while_paused() is True
    timer.join()


def test_sleep_is_cut_short_by_stop():
    control = RunControl()
    assert control.sleep(0) is True

    control.stop()
    assert control.sleep(30) is False
    assert control.stop_requested


def test_pause_after_stop_is_ignored():
    control = RunControl()
    control.stop()
    control.pause()
    assert control.pause_requested is False
