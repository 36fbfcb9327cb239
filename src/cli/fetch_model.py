"""
CLI for pre-fetching the model artifact.

Downloads the model into the cache and loads it once to verify it,
so container images can ship with the artifact baked in.

Examples:
  MODEL_URL=https://example.com/model.pt python -m src.cli.fetch_model
  python -m src.cli.fetch_model --url https://example.com/model.pt --cache-dir /models
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from ..config import Settings
from ..exceptions import ModelLoadError
from ..services.model_loader import is_url, cached_model_path, load_classifier


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Pre-fetch and verify the model artifact.")
    parser.add_argument(
        "--url",
        dest="url",
        default=None,
        help="Model URL or local path (defaults to MODEL_URL env).",
    )
    parser.add_argument(
        "--cache-dir",
        dest="cache_dir",
        default=None,
        help="Download cache directory (defaults to MODEL_CACHE_DIR env).",
    )
    parser.add_argument(
        "--timeout",
        dest="timeout",
        type=int,
        default=None,
        help="Download timeout in seconds (defaults to MODEL_DOWNLOAD_TIMEOUT env).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    logger = logging.getLogger(__name__)

    try:
        settings = Settings(model_url=args.url) if args.url else Settings()
    except ValidationError as e:
        logger.error("Invalid configuration (set MODEL_URL or pass --url): %s", e)
        return 1

    url = settings.model_url
    cache_dir = args.cache_dir or settings.model_cache_dir
    timeout = args.timeout or settings.model_download_timeout

    try:
        load_classifier(
            model_url=url,
            cache_dir=cache_dir,
            device="cpu",
            input_layout=settings.model_input_layout,
            timeout=timeout,
        )
    except ModelLoadError as e:
        logger.error("%s", e)
        return 1

    if is_url(url):
        logger.info("Model cached at %s", cached_model_path(url, cache_dir))
    else:
        logger.info("Model at %s loads correctly", url)
    return 0


if __name__ == "__main__":
    sys.exit(main())
