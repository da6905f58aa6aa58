import logging
import threading

import pytest

from autotx.errors import BroadcastError, RetryError
from autotx.retry import RetryableRemoteQuery, retry


class Flaky:
    def __init__(self, failures, result="ok"):
        self.failures = failures
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError("timeout")
        return self.result


@pytest.mark.parametrize("failures", [0, 1, 4])
def test_retry_succeeds_after_k_failures(sleeps, failures):
    op = Flaky(failures)
    assert retry(5, 2, op, sleep=sleeps) == "ok"
    assert op.calls == failures + 1
    assert sleeps.calls == [2] * failures


def test_retry_exhausted_raises_last_error(sleeps):
    op = Flaky(10)
    with pytest.raises(RetryError) as exc:
        retry(3, 1, op, sleep=sleeps, description="get nonce")
    assert op.calls == 3
    assert exc.value.attempts == 3
    assert isinstance(exc.value.last_error, ConnectionError)
    assert len(sleeps.calls) == 2


def test_retry_requires_an_attempt():
    with pytest.raises(ValueError):
        retry(0, 1, lambda: None)


def test_read_falls_back_after_exhaustion(sleeps):
    query = RetryableRemoteQuery(attempts=5, delay=5, sleep=sleeps)
    op = Flaky(100)
    assert query.read(op, "get balance", fallback=0) == 0
    assert op.calls == 5


def test_read_returns_value(sleeps):
    query = RetryableRemoteQuery(attempts=5, delay=5, sleep=sleeps)
    assert query.read(Flaky(2, result=7), "get nonce") == 7
    assert sleeps.calls == [5, 5]


def test_write_raises_broadcast_error(sleeps):
    query = RetryableRemoteQuery(attempts=2, delay=5, sleep=sleeps)
    op = Flaky(100)
    with pytest.raises(BroadcastError):
        query.write(op, "send transaction")
    assert op.calls == 2


def test_cancel_stops_retrying():
    cancel = threading.Event()
    calls = []

    def op():
        calls.append(1)
        cancel.set()
        raise ConnectionError("down")

    query = RetryableRemoteQuery(attempts=5, delay=60, cancel=cancel)
    assert query.read(op, "get balance", fallback=0) == 0
    assert len(calls) == 1


def test_each_failed_attempt_is_logged(sleeps, caplog):
    query = RetryableRemoteQuery(attempts=3, delay=1, sleep=sleeps)
    with caplog.at_level(logging.WARNING, logger="autotx.retry"):
        assert query.read(Flaky(2, result=4), "get nonce") == 4
    messages = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert len(messages) == 2
    assert messages[0].startswith("Failed to get nonce (attempt 1/3)")
    assert messages[1].startswith("Failed to get nonce (attempt 2/3)")


def test_read_fallback_is_logged(sleeps, caplog):
    query = RetryableRemoteQuery(attempts=2, delay=1, sleep=sleeps)
    with caplog.at_level(logging.WARNING, logger="autotx.retry"):
        assert query.read(Flaky(100), "get balance", fallback=0) == 0
    messages = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert len(messages) == 3
    assert messages[-1] == "Failed to get balance after 2 attempt(s), using fallback value 0"
