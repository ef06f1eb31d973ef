"""
Command-line entry point.

Usage:
  slidesync talk.txt --slides 12
  slidesync talk.txt --analyses analyses.json --ai
  slidesync talk.txt --slides 5 --header Intro --header Summary
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from slidesync.config import LOG_FILE, LOG_JSON, LOG_LEVEL
from slidesync.core import InputValidationError, get_logger, setup_logging
from slidesync.models import AlignmentRequest, SlideAnalysis
from slidesync.services.infrastructure.llm import ModelInvoker
from slidesync.services.pipeline.alignment import AlignmentPipeline
from slidesync.services.pipeline.segmentation import SegmentationConfig

logger = get_logger(__name__, component="cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slidesync",
        description="Align a speaking script to presentation slides.",
    )
    parser.add_argument("script", type=Path, help="Path to the script text file")
    parser.add_argument("--slides", type=int, default=None, help="Number of slides")
    parser.add_argument(
        "--analyses",
        type=Path,
        default=None,
        help="JSON file with a list of slide analyses (camelCase or snake_case keys)",
    )
    parser.add_argument("--ai", action="store_true", help="Use the configured LLM provider")
    parser.add_argument("--no-coaching", action="store_true", help="Skip per-slide coaching")
    parser.add_argument(
        "--header",
        action="append",
        default=None,
        help="Section header phrase (repeatable); replaces the default headers",
    )
    parser.add_argument("--output", type=Path, default=None, help="Write JSON here instead of stdout")
    return parser


def load_analyses(path: Optional[Path]) -> List[SlideAnalysis]:
    if path is None:
        return []
    data = json.loads(path.read_text(encoding="utf-8"))
    return [SlideAnalysis.model_validate(item) for item in data]


async def run(args: argparse.Namespace) -> str:
    request = AlignmentRequest(
        script=args.script.read_text(encoding="utf-8"),
        slide_count=args.slides,
        analyses=load_analyses(args.analyses),
        include_coaching=not args.no_coaching,
    )
    segmentation = SegmentationConfig(section_headers=args.header) if args.header else None
    pipeline = AlignmentPipeline(
        invoker=ModelInvoker() if args.ai else None,
        segmentation_config=segmentation,
    )
    response = await pipeline.execute(request)
    return response.model_dump_json(by_alias=True, indent=2)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(
        level=LOG_LEVEL,
        log_file=Path(LOG_FILE) if LOG_FILE else None,
        use_json=LOG_JSON,
        stream=sys.stderr,
    )

    try:
        output = asyncio.run(run(args))
    except InputValidationError as e:
        logger.error(f"Invalid input: {e}")
        return 2

    if args.output:
        args.output.write_text(output, encoding="utf-8")
        logger.info(f"Wrote alignment to {args.output}")
    else:
        sys.stdout.write(output + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
