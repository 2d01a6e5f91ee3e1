"""Entry point — wires Config → (PDF pipeline) → AnalysisClient and prints the result."""
import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from rich import print_json
from rich.console import Console
from rich.logging import RichHandler

from src.config import Config
from src.constants import (
    ENV_TEST_IMAGE_PATH,
    LOG_LEVELS,
    MERGED_IMAGE_NAME,
    MSG_HEALTH,
)
from src.errors import LandTitleError
from src.pipeline.pdf import render_pdf
from src.vision.client import AnalysisClient
from src.vision.encoding import encode_image, is_valid_image_reference

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, LOG_LEVELS.get(level, "INFO")))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(console=Console(stderr=True), rich_tracebacks=True))


def _parse_args(argv: Optional[list[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="land-title-extract",
        description="Extract structured fields from a Vietnamese land-title certificate.",
    )
    parser.add_argument("input", nargs="?", help="PDF, image file, or http(s)/data URL")
    parser.add_argument("--prompt", help="replace the built-in extraction prompt")
    parser.add_argument("--no-follow-up", action="store_true", help="skip the follow-up question")
    parser.add_argument("--compress", action="store_true", help="JPEG-compress a rendered PDF")
    return parser.parse_args(argv)


async def resolve_image_reference(source: str, config: Config, *, compress: bool = False) -> str:
    """Turn a CLI input into something the model accepts: a URL or an inline data URL."""
    match source:
        case s if is_valid_image_reference(s):
            return s
        case s if Path(s).suffix.lower() == ".pdf":
            return encode_image(await render_pdf(s, config=config, compress=compress))
        case s:
            return encode_image(s)


def default_source(config: Config) -> str:
    """Explicit TEST_IMAGE_PATH, else the merged image render_pdf writes."""
    return os.getenv(ENV_TEST_IMAGE_PATH) or str(Path(config.output_dir) / MERGED_IMAGE_NAME)


async def run(args: argparse.Namespace, config: Config) -> dict:
    async with AnalysisClient(config) as client:
        logger.info(MSG_HEALTH, json.dumps(client.health_status().to_dict()))

        source = args.input or default_source(config)
        image_reference = await resolve_image_reference(source, config, compress=args.compress)
        result = await client.analyze(
            image_reference,
            custom_prompt=args.prompt,
            include_follow_up=not args.no_follow_up,
        )
    return result.to_dict()


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        config = Config.from_env()
        _setup_logging(config.log_level)
        result = asyncio.run(run(args, config))
    except LandTitleError as exc:
        logger.error("%s", exc)
        return 1

    print_json(data=result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
