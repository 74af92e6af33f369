"""
Replicate predictions client.

Create-then-poll API:
  POST {base}/predictions        {version, input}  -> {id, ...}
  GET  {base}/predictions/{id}                     -> {status, output?, error?}

submit() raises on anything it cannot turn into a JobHandle: a job whose
identifier cannot be read is unusable even if it was created upstream.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .base import HttpProvider
from .types import JobHandle

DEFAULT_INPUTS: Dict[str, Any] = {
    "top_p": 0.9,
    "temperature": 0.1,
    "max_length_tokens": 2048,
    "repetition_penalty": 1.1,
}


class ReplicateError(Exception):
    """Base error for the Replicate client."""
    pass


class JobSubmissionError(ReplicateError):
    """A prediction could not be created or its id could not be read."""
    pass


class JobPollError(ReplicateError):
    """A prediction's status could not be fetched."""
    pass


class ReplicateClient(HttpProvider):
    """
    Thin client for the Replicate predictions API.

    Usage:
        client = ReplicateClient(api_key="r8_...")
        handle = await client.submit(version, {"image": url, "prompt": "..."})
        job = await client.fetch(handle)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.replicate.com/v1",
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if not api_key:
            raise ValueError("Replicate API key is required")
        super().__init__(timeout=timeout, http_client=http_client, logger=logger)
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")

    @property
    def predictions_url(self) -> str:
        return f"{self.base_url}/predictions"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def submit(self, version: str, inputs: Dict[str, Any]) -> JobHandle:
        """
        Create a prediction.

        Missing default sampling inputs are filled in; caller values win.

        Raises:
            ValueError: empty version or inputs
            JobSubmissionError: transport failure, non-2xx, bad JSON, or missing id
        """
        if not version:
            raise ValueError("Model version cannot be empty.")
        if not inputs:
            raise ValueError("Input cannot be empty.")

        payload = {"version": version, "input": {**DEFAULT_INPUTS, **inputs}}
        self.logger.info(f"Creating prediction with model version: {version}")

        try:
            response = await self._request(
                "POST", self.predictions_url, json=payload, headers=self._headers()
            )
        except httpx.HTTPError as e:
            self.logger.error(f"Error creating prediction: {e}")
            raise JobSubmissionError(f"Error communicating with Replicate: {e}") from e

        if not response.is_success:
            self.logger.error(
                f"Unexpected response. Status: {response.status_code}, Content: {response.text}"
            )
            raise JobSubmissionError(f"Error: {response.status_code} - {response.text}")

        try:
            body = response.json()
        except ValueError as e:
            self.logger.error("Invalid JSON format in prediction response.")
            raise JobSubmissionError("Failed to parse JSON response.") from e

        job_id = body.get("id") if isinstance(body, dict) else None
        if not isinstance(job_id, str) or not job_id:
            self.logger.error("Prediction ID not found in the response.")
            raise JobSubmissionError("Malformed response: Prediction ID missing.")

        return JobHandle(id=job_id)

    async def fetch(self, handle: JobHandle) -> Dict[str, Any]:
        """
        Fetch the raw prediction document.

        Raises:
            JobPollError: transport failure, non-2xx, or a body that is not a JSON object
        """
        url = f"{self.predictions_url}/{handle.id}"
        self.logger.debug(f"Getting prediction result for ID: {handle.id}")

        try:
            response = await self._request("GET", url, headers=self._headers())
        except httpx.HTTPError as e:
            raise JobPollError(f"Error communicating with Replicate: {e}") from e

        if not response.is_success:
            raise JobPollError(f"Error: {response.status_code} - {response.text}")

        try:
            body = response.json()
        except ValueError as e:
            raise JobPollError("Failed to parse JSON response.") from e

        if not isinstance(body, dict):
            raise JobPollError("Malformed response: expected a JSON object.")
        return body

    async def account(self) -> Dict[str, Any]:
        """
        Check that the API key is accepted.

        Raises:
            ReplicateError: on any failure
        """
        try:
            response = await self._request(
                "GET", f"{self.base_url}/account", headers=self._headers()
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise ReplicateError(
                f"Replicate rejected the account check: {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ReplicateError(f"Error checking Replicate account: {e}") from e
