"""
Replicate workflow: optional CNN enrichment -> submit prediction -> poll to completion.

CNN enrichment here is advisory. A CNN failure is logged and the job runs
with the plain prompt; only the composite workflow treats it as terminal.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from inference import (
    ImageClassifier,
    ImageFetchError,
    JobPoller,
    JobResult,
    ReplicateClient,
    fetch_image,
    filename_from_url,
)
from inference.prompts import REPLICATE_DEFAULT_PROMPT, compose_prompt, with_cnn_context


@dataclass
class ReplicateRunResult:
    job: JobResult
    prompt: str
    label: Optional[str] = None
    confidence: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.job.ok

    @property
    def output(self) -> Any:
        return self.job.output


class ReplicateWorkflow:
    """
    Run an image + prompt through a Replicate model version.

    Raises JobSubmissionError from run() when the job cannot be created;
    every later failure is reported through ReplicateRunResult.job.
    """

    def __init__(
        self,
        client: ReplicateClient,
        poller: JobPoller,
        model_version: str,
        classifier: Optional[ImageClassifier] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.client = client
        self.poller = poller
        self.model_version = model_version
        self.classifier = classifier
        self._http_client = http_client
        self.logger = logger or logging.getLogger(__name__)

    async def run(
        self,
        image_url: str,
        user_prompt: Optional[str] = None,
        use_cnn: bool = False,
        image_bytes: Optional[bytes] = None,
    ) -> ReplicateRunResult:
        if not image_url:
            raise ValueError("An image URL is required.")

        prompt = compose_prompt(REPLICATE_DEFAULT_PROMPT, user_prompt, separator=" ")
        label, confidence = None, None

        if use_cnn:
            label, confidence = await self._classify(image_url, image_bytes)
            prompt = with_cnn_context(prompt, label, confidence)

        self.logger.info(f"Creating prediction for model version: {self.model_version}")
        handle = await self.client.submit(
            self.model_version, {"image": image_url, "prompt": prompt}
        )

        self.logger.info(f"Polling for prediction result with ID: {handle.id}")
        job = await self.poller.await_completion(handle)
        if job.ok:
            self.logger.info("Prediction completed successfully with output.")
        else:
            self.logger.error(f"Prediction ended with status {job.status}: {job.error}")

        return ReplicateRunResult(job=job, prompt=prompt, label=label, confidence=confidence)

    async def _classify(self, image_url: str, image_bytes: Optional[bytes]):
        if self.classifier is None:
            self.logger.warning("CNN enrichment requested but no classifier is configured")
            return None, None

        if not image_bytes:
            try:
                image_bytes = await fetch_image(image_url, http_client=self._http_client)
            except ImageFetchError as e:
                self.logger.warning(f"Skipping CNN enrichment: {e}")
                return None, None

        try:
            result = await self.classifier.predict(image_bytes, filename_from_url(image_url))
        except Exception as e:
            self.logger.warning(f"Skipping CNN enrichment, classifier raised: {e}")
            return None, None

        if not result.success:
            self.logger.warning(f"Skipping CNN enrichment: {result.detail}")
            return None, None
        return result.label, result.confidence
