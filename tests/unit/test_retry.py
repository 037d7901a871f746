"""Unit tests for the retry controller."""

import pytest

from jobassist.errors import ConfigurationError, RequestTimeout, UnexpectedResponseShape, UpstreamCallFailure
from jobassist.retry import backoff_delay, retry_with_backoff


class Flaky:
    """Fails ``failures`` times, then returns ``result``."""

    def __init__(self, failures, result="ok", error=None):
        self.failures = failures
        self.result = result
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error or UpstreamCallFailure(f"boom {self.calls}")
        return self.result


@pytest.mark.unit
def test_backoff_delay_doubles():
    assert [backoff_delay(a) for a in range(4)] == [1.0, 2.0, 4.0, 8.0]
    assert backoff_delay(2, base_delay=0.5) == 2.0


@pytest.mark.unit
def test_success_on_first_attempt_makes_one_call():
    op = Flaky(0)
    delays = []
    assert retry_with_backoff(op, sleep=delays.append) == "ok"
    assert op.calls == 1
    assert delays == []


@pytest.mark.unit
def test_succeeds_on_third_attempt_with_doubling_delays():
    op = Flaky(2, result="third")
    delays = []

    assert retry_with_backoff(op, max_retries=3, sleep=delays.append) == "third"
    assert op.calls == 3
    assert delays == [1.0, 2.0]


@pytest.mark.unit
def test_exhaustion_raises_last_error():
    op = Flaky(5)
    delays = []

    with pytest.raises(UpstreamCallFailure, match="boom 3"):
        retry_with_backoff(op, max_retries=3, sleep=delays.append)
    assert op.calls == 3
    # no sleep after the final attempt
    assert delays == [1.0, 2.0]


@pytest.mark.unit
def test_unknown_exceptions_are_retried_blindly():
    op = Flaky(1, error=ValueError("bad request"))
    assert retry_with_backoff(op, sleep=lambda s: None) == "ok"
    assert op.calls == 2


@pytest.mark.unit
@pytest.mark.parametrize(
    "error",
    [UnexpectedResponseShape("no content"), ConfigurationError("no key")],
)
def test_non_retryable_errors_surface_immediately(error):
    op = Flaky(3, error=error)
    delays = []

    with pytest.raises(type(error)):
        retry_with_backoff(op, sleep=delays.append)
    assert op.calls == 1
    assert delays == []


@pytest.mark.unit
def test_at_least_one_attempt_is_made():
    op = Flaky(0)
    assert retry_with_backoff(op, max_retries=0, sleep=lambda s: None) == "ok"
    assert op.calls == 1


@pytest.mark.unit
def test_on_retry_is_told_about_each_retry():
    op = Flaky(2)
    seen = []
    retry_with_backoff(op, sleep=lambda s: None, on_retry=lambda a, d, e: seen.append((a, d, str(e))))
    assert seen == [(0, 1.0, "boom 1"), (1, 2.0, "boom 2")]


@pytest.mark.unit
def test_deadline_stops_before_a_sleep_that_would_overrun():
    op = Flaky(5)
    now = [0.0]
    delays = []

    def sleep(seconds):
        delays.append(seconds)
        now[0] += seconds

    with pytest.raises(RequestTimeout) as excinfo:
        retry_with_backoff(op, max_retries=5, deadline=2.5, sleep=sleep, clock=lambda: now[0])
    # 1s fits, the following 2s would end at 3.0 > 2.5
    assert delays == [1.0]
    assert op.calls == 2
    assert isinstance(excinfo.value.__cause__, UpstreamCallFailure)


@pytest.mark.unit
def test_deadline_already_passed_makes_no_attempt():
    op = Flaky(0)
    with pytest.raises(RequestTimeout):
        retry_with_backoff(op, deadline=10.0, clock=lambda: 10.0, sleep=lambda s: None)
    assert op.calls == 0
