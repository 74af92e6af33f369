"""
Batch runner for the composite CNN + LLM endpoint.

Sends every (image URL × model × prompt) combination to a running gateway
and collects one record per call. Failed calls are recorded, never raised,
so one bad image does not stop the batch.
"""

import csv
import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

import requests

logger = logging.getLogger(__name__)


@dataclass
class BatchRecord:
    model: str
    image_url: str
    prompt: str
    temperature: float
    response: str
    predicted_label: Optional[str] = None
    confidence: Optional[float] = None
    status_code: Optional[int] = None
    success: bool = False


@dataclass
class ImageResults:
    image_url: str
    results: List[BatchRecord] = field(default_factory=list)


class BatchProcessor:
    """
    Drive POST {api_base_url}/api/cnn-llm/predict-and-analyze over many inputs.

    Usage:
        processor = BatchProcessor("http://localhost:8000")
        results = processor.run(urls, ["ChatGpt4o"], [None])
        processor.save(results, Path("Results"), "airplanes")
    """

    def __init__(
        self,
        api_base_url: str,
        timeout_s: float = 300.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_base_url:
            raise ValueError("api_base_url is required")
        self.endpoint = f"{api_base_url.rstrip('/')}/api/cnn-llm/predict-and-analyze"
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def process_one(
        self,
        image_url: str,
        model: str,
        prompt: Optional[str] = None,
        temperature: float = 1.0,
        use_cnn: bool = True,
    ) -> BatchRecord:
        record = BatchRecord(
            model=model,
            image_url=image_url,
            prompt=prompt or "",
            temperature=temperature,
            response="Error: Processing Failed",
        )
        payload = {
            "model": model,
            "imageUrl": image_url,
            "prompt": prompt,
            "temperature": temperature,
            "useCnn": use_cnn,
        }

        try:
            resp = self.session.post(self.endpoint, json=payload, timeout=self.timeout_s)
        except requests.RequestException as e:
            logger.error(f"Request for {image_url} ({model}) failed: {e}")
            record.response = f"Error: Unhandled exception during API call: {e}"
            return record

        record.status_code = resp.status_code

        try:
            body = resp.json()
        except ValueError:
            body = None

        if not resp.ok:
            detail = body.get("detail") if isinstance(body, dict) else resp.text
            record.response = (
                f"Error: API call failed with status {resp.status_code}. "
                f"Details: {detail or 'No details provided.'}"
            )
            return record

        if not isinstance(body, dict):
            record.response = "Error: Unexpected success response format."
            return record

        record.success = True
        record.response = body.get("response") or "LLM returned empty response."
        record.predicted_label = body.get("predictedLabel")
        record.confidence = body.get("confidence")
        return record

    def run(
        self,
        image_urls: Iterable[str],
        models: List[str],
        prompts: List[Optional[str]],
        temperature: float = 1.0,
        use_cnn: bool = True,
    ) -> List[ImageResults]:
        all_results: List[ImageResults] = []
        for image_url in image_urls:
            logger.info(f"Processing image: {image_url}")
            image_results = ImageResults(image_url=image_url)
            for model in models:
                for prompt in prompts:
                    record = self.process_one(image_url, model, prompt, temperature, use_cnn)
                    status = "ok" if record.success else f"failed ({record.status_code})"
                    logger.info(f"  - {model}: {status}")
                    image_results.results.append(record)
            all_results.append(image_results)
        return all_results

    @staticmethod
    def save(results: List[ImageResults], output_dir: Path, name: str) -> tuple:
        """
        Write <name>_results_<timestamp>_detailed.{json,csv}.

        Returns:
            (json_path, csv_path)
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        safe_name = name.replace("/", "_").replace("\\", "_")
        json_path = output_dir / f"{safe_name}_results_{timestamp}_detailed.json"
        csv_path = output_dir / f"{safe_name}_results_{timestamp}_detailed.csv"

        with open(json_path, "w", encoding="utf-8") as f:
            json.dump([asdict(r) for r in results], f, indent=2, ensure_ascii=False)

        fieldnames = list(BatchRecord.__dataclass_fields__)
        with open(csv_path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for image_results in results:
                for record in image_results.results:
                    writer.writerow(asdict(record))

        return json_path, csv_path
