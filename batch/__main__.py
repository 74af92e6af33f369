#!/usr/bin/env python3
"""
Batch alt-text generation against a running gateway.

Usage:
    python -m batch --urls images.txt --model ChatGpt4o --model Gemini2_0Flash
    python -m batch --image-url https://example.com/jet.jpg --no-cnn
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List

from batch.runner import BatchProcessor

DEFAULT_MODELS = ["ChatGpt4_1", "ChatGpt4o", "Gemini2_0Flash"]


def _read_urls(args) -> List[str]:
    urls = list(args.image_url or [])
    if args.urls:
        with open(args.urls, encoding="utf-8") as f:
            urls.extend(line.strip() for line in f if line.strip() and not line.startswith("#"))
    return urls


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the CNN + LLM workflow over many images")
    parser.add_argument("--api-base-url", default=os.getenv("API_BASE_URL", "http://localhost:8000"))
    parser.add_argument("--urls", help="File with one image URL per line")
    parser.add_argument("--image-url", action="append", help="Image URL (repeatable)")
    parser.add_argument("--model", action="append", help="Model name (repeatable)")
    parser.add_argument("--prompt", action="append", help="Extra prompt text (repeatable)")
    parser.add_argument("--temperature", type=float, default=1.0)
    parser.add_argument("--no-cnn", action="store_true", help="Skip the CNN stage")
    parser.add_argument("--output-dir", default="Results")
    parser.add_argument("--name", default="batch")
    parser.add_argument("--timeout", type=float, default=300.0)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    urls = _read_urls(args)
    if not urls:
        print("✗ No image URLs given (use --urls or --image-url)")
        return 2

    models = args.model or DEFAULT_MODELS
    prompts = args.prompt or [None]

    processor = BatchProcessor(args.api_base_url, timeout_s=args.timeout)
    results = processor.run(
        urls, models, prompts, temperature=args.temperature, use_cnn=not args.no_cnn
    )
    json_path, csv_path = processor.save(results, Path(args.output_dir), args.name)

    total = sum(len(r.results) for r in results)
    ok = sum(1 for r in results for record in r.results if record.success)
    print(f"✓ {ok}/{total} calls succeeded")
    print(f"  - {json_path}")
    print(f"  - {csv_path}")
    return 0 if ok == total else 1


if __name__ == "__main__":
    sys.exit(main())
