"""
Bounded wait-for-completion loop for create-then-poll job APIs.

Transition table (per poll):
  pending / running -> sleep interval_s, poll again
  succeeded         -> return output (absent output is a failure, not retried)
  failed            -> failure with the remote error message
  unknown status    -> failure immediately
  missing status    -> failure immediately (malformed response)
  fetch raised      -> failure immediately

Bounds:
  max_attempts polls and a timeout_s wall-clock deadline; exceeding either
  returns status="timeout".
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from .types import JobHandle, JobResult, JobStatus

FetchFn = Callable[[JobHandle], Awaitable[Dict[str, Any]]]
SleepFn = Callable[[float], Awaitable[Any]]
ClockFn = Callable[[], float]


class JobPoller:
    """
    Drive a remote job to a terminal state.

    Usage:
        poller = JobPoller(replicate_client.fetch, interval_s=2.0, max_attempts=150)
        result = await poller.await_completion(handle)
    """

    def __init__(
        self,
        fetch: FetchFn,
        interval_s: float = 2.0,
        max_attempts: int = 150,
        timeout_s: Optional[float] = 300.0,
        sleep: SleepFn = asyncio.sleep,
        clock: ClockFn = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        if interval_s < 0:
            raise ValueError("interval_s must be >= 0")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._fetch = fetch
        self.interval_s = interval_s
        self.max_attempts = max_attempts
        self.timeout_s = timeout_s
        self._sleep = sleep
        self._clock = clock
        self.logger = logger or logging.getLogger(__name__)

    async def await_completion(self, handle: JobHandle) -> JobResult:
        """
        Poll until the job reaches a terminal state or a bound is hit.

        Returns:
            JobResult (never raises for remote or transport failures)
        """
        deadline = self._clock() + self.timeout_s if self.timeout_s is not None else None
        attempts = 0

        while attempts < self.max_attempts:
            attempts += 1
            self.logger.info(f"Fetching job status for ID: {handle.id} (attempt {attempts})")

            try:
                document = await self._fetch(handle)
            except Exception as e:
                self.logger.error(f"Fetching job {handle.id} failed: {e}")
                return JobResult(status="failed", error=str(e), attempts=attempts)

            if not isinstance(document, dict) or "status" not in document:
                self.logger.error("Invalid response structure; status property missing.")
                return JobResult(
                    status="failed",
                    error="Response structure missing 'status' property.",
                    attempts=attempts,
                )

            raw_status = document.get("status")
            status = JobStatus.from_remote(raw_status)
            self.logger.info(f"Job {handle.id} status: {raw_status}")

            if status == JobStatus.SUCCEEDED:
                output = document.get("output")
                if output is None:
                    self.logger.error("Job completed but no output was found.")
                    return JobResult(
                        status="failed",
                        error="Prediction succeeded without output.",
                        attempts=attempts,
                    )
                return JobResult(status="succeeded", output=output, attempts=attempts)

            if status == JobStatus.FAILED:
                message = document.get("error") or "Unknown error."
                self.logger.error(f"Job failed with message: {message}")
                return JobResult(
                    status="failed", error=f"Prediction failed: {message}", attempts=attempts
                )

            if status == JobStatus.UNKNOWN:
                self.logger.warning(f"Encountered unexpected status: {raw_status}")
                return JobResult(
                    status="failed",
                    error=f"Unexpected prediction status: {raw_status}",
                    attempts=attempts,
                )

            # pending / running
            if attempts >= self.max_attempts:
                break
            if deadline is not None and self._clock() + self.interval_s > deadline:
                self.logger.warning(f"Job {handle.id} would exceed its {self.timeout_s}s deadline")
                return JobResult(
                    status="timeout",
                    error=f"Prediction did not finish within {self.timeout_s} seconds.",
                    attempts=attempts,
                )
            await self._sleep(self.interval_s)

        self.logger.warning(f"Job {handle.id} still running after {attempts} polls")
        return JobResult(
            status="timeout",
            error=f"Prediction did not finish after {attempts} polls.",
            attempts=attempts,
        )
