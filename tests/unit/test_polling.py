"""
tests/unit/test_polling.py

Tests for JobPoller: every transition of the wait-for-completion loop,
using a scripted fetch, a recording sleep and a fake clock.
"""

import pytest

from inference import JobHandle, JobPoller


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def scripted_fetch(documents):
    """Return each document in turn; exceptions in the list are raised."""
    remaining = list(documents)
    calls = []

    async def fetch(handle):
        calls.append(handle.id)
        item = remaining.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    fetch.calls = calls
    return fetch


def make_poller(documents, interval_s=2.0, max_attempts=150, timeout_s=300.0):
    clock = FakeClock()
    sleeps = []

    async def sleep(seconds):
        sleeps.append(seconds)
        clock.now += seconds

    fetch = scripted_fetch(documents)
    poller = JobPoller(
        fetch,
        interval_s=interval_s,
        max_attempts=max_attempts,
        timeout_s=timeout_s,
        sleep=sleep,
        clock=clock,
    )
    return poller, fetch, sleeps


HANDLE = JobHandle(id="pred-123")


class TestTerminalStates:
    @pytest.mark.asyncio
    async def test_succeeds_after_two_running_polls(self):
        poller, fetch, sleeps = make_poller([
            {"status": "processing"},
            {"status": "processing"},
            {"status": "succeeded", "output": ["A jet", " on a runway."]},
        ])

        result = await poller.await_completion(HANDLE)

        assert result.ok
        assert result.output == ["A jet", " on a runway."]
        assert result.attempts == 3
        assert sleeps == [2.0, 2.0]
        assert fetch.calls == ["pred-123"] * 3

    @pytest.mark.asyncio
    async def test_starting_is_treated_as_pending(self):
        poller, _, sleeps = make_poller([
            {"status": "starting"},
            {"status": "succeeded", "output": "done"},
        ])

        result = await poller.await_completion(HANDLE)

        assert result.ok
        assert sleeps == [2.0]

    @pytest.mark.asyncio
    async def test_failed_carries_remote_error_without_sleeping(self):
        poller, _, sleeps = make_poller([{"status": "failed", "error": "CUDA out of memory"}])

        result = await poller.await_completion(HANDLE)

        assert result.status == "failed"
        assert result.error == "Prediction failed: CUDA out of memory"
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_failed_without_error_message(self):
        poller, _, _ = make_poller([{"status": "failed"}])

        result = await poller.await_completion(HANDLE)

        assert result.error == "Prediction failed: Unknown error."

    @pytest.mark.asyncio
    async def test_unknown_status_fails_immediately(self):
        poller, _, sleeps = make_poller([{"status": "canceled"}])

        result = await poller.await_completion(HANDLE)

        assert result.status == "failed"
        assert "canceled" in result.error
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_missing_status_is_malformed(self):
        poller, _, _ = make_poller([{"id": "pred-123"}])

        result = await poller.await_completion(HANDLE)

        assert result.status == "failed"
        assert result.error == "Response structure missing 'status' property."

    @pytest.mark.asyncio
    async def test_succeeded_without_output_is_a_failure(self):
        poller, _, _ = make_poller([{"status": "succeeded", "output": None}])

        result = await poller.await_completion(HANDLE)

        assert result.status == "failed"
        assert result.error == "Prediction succeeded without output."

    @pytest.mark.asyncio
    async def test_fetch_exception_becomes_failure(self):
        poller, _, _ = make_poller([RuntimeError("connection reset")])

        result = await poller.await_completion(HANDLE)

        assert result.status == "failed"
        assert result.error == "connection reset"


class TestBounds:
    @pytest.mark.asyncio
    async def test_attempt_limit_returns_timeout(self):
        poller, fetch, sleeps = make_poller(
            [{"status": "processing"}] * 3, max_attempts=3, timeout_s=None
        )

        result = await poller.await_completion(HANDLE)

        assert result.status == "timeout"
        assert result.attempts == 3
        assert len(fetch.calls) == 3
        assert len(sleeps) == 2

    @pytest.mark.asyncio
    async def test_deadline_returns_timeout_before_oversleeping(self):
        poller, fetch, sleeps = make_poller(
            [{"status": "processing"}] * 10, interval_s=2.0, timeout_s=5.0
        )

        result = await poller.await_completion(HANDLE)

        assert result.status == "timeout"
        assert sum(sleeps) <= 5.0
        assert len(fetch.calls) == 3

    def test_invalid_bounds_rejected(self):
        async def fetch(handle):
            return {}

        with pytest.raises(ValueError):
            JobPoller(fetch, max_attempts=0)
        with pytest.raises(ValueError):
            JobPoller(fetch, interval_s=-1)
