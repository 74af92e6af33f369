"""
tests/unit/test_replicate_workflow.py

Tests for ReplicateWorkflow: prompt composition, advisory CNN enrichment,
and hand-off to the poller.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from inference import (
    JobHandle,
    JobResult,
    JobSubmissionError,
    StubImageClassifier,
)
from inference.prompts import REPLICATE_DEFAULT_PROMPT
from workflows import ReplicateWorkflow


def make_workflow(classifier=None, job=None):
    client = MagicMock()
    client.submit = AsyncMock(return_value=JobHandle(id="pred-9"))
    poller = MagicMock()
    poller.await_completion = AsyncMock(
        return_value=job or JobResult(status="succeeded", output=["A jet."], attempts=2)
    )
    workflow = ReplicateWorkflow(
        client=client, poller=poller, model_version="v1", classifier=classifier
    )
    return workflow, client, poller


class TestReplicateWorkflow:
    @pytest.mark.asyncio
    async def test_submits_default_prompt_and_polls(self):
        workflow, client, poller = make_workflow()

        result = await workflow.run("https://example.com/jet.jpg")

        assert result.ok
        assert result.output == ["A jet."]
        client.submit.assert_awaited_once_with(
            "v1", {"image": "https://example.com/jet.jpg", "prompt": REPLICATE_DEFAULT_PROMPT}
        )
        poller.await_completion.assert_awaited_once_with(JobHandle(id="pred-9"))

    @pytest.mark.asyncio
    async def test_user_prompt_is_appended(self):
        workflow, client, _ = make_workflow()

        result = await workflow.run("https://example.com/jet.jpg", "Mention the weather.")

        assert result.prompt == f"{REPLICATE_DEFAULT_PROMPT} Mention the weather."

    @pytest.mark.asyncio
    async def test_cnn_hint_added_when_enabled(self):
        classifier = StubImageClassifier(label="F-16", confidence=0.9)
        workflow, client, _ = make_workflow(classifier=classifier)

        result = await workflow.run(
            "https://example.com/jet.jpg", use_cnn=True, image_bytes=b"img"
        )

        assert result.label == "F-16"
        assert result.confidence == 0.9
        sent_prompt = client.submit.await_args.args[1]["prompt"]
        assert "F-16" in sent_prompt
        assert classifier.calls[0]["filename"] == "jet.jpg"

    @pytest.mark.asyncio
    async def test_cnn_failure_is_advisory(self):
        classifier = StubImageClassifier(fail_with="CNN down")
        workflow, client, _ = make_workflow(classifier=classifier)

        result = await workflow.run(
            "https://example.com/jet.jpg", use_cnn=True, image_bytes=b"img"
        )

        assert result.ok
        assert result.label is None
        assert client.submit.await_args.args[1]["prompt"] == REPLICATE_DEFAULT_PROMPT

    @pytest.mark.asyncio
    async def test_submission_error_propagates(self):
        workflow, client, poller = make_workflow()
        client.submit.side_effect = JobSubmissionError("Error: 422 - bad version")

        with pytest.raises(JobSubmissionError):
            await workflow.run("https://example.com/jet.jpg")
        poller.await_completion.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timeout_result_is_returned(self):
        workflow, _, _ = make_workflow(
            job=JobResult(status="timeout", error="Prediction did not finish.", attempts=150)
        )

        result = await workflow.run("https://example.com/jet.jpg")

        assert not result.ok
        assert result.job.status == "timeout"

    @pytest.mark.asyncio
    async def test_missing_url_rejected(self):
        workflow, client, _ = make_workflow()

        with pytest.raises(ValueError):
            await workflow.run("")
        client.submit.assert_not_awaited()
