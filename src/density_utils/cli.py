#!/usr/bin/env python3
"""
Fill in missing ingredient densities by matching each ingredient against a
density reference list with an Anthropic model on AWS Bedrock.

Usage:
    fill-densities --model anthropic.claude-3-5-haiku-20241022-v1:0 --limit 10 --out filled.csv
    fill-densities --model <inference-profile-arn> --limit 0 --workers 4 --out filled.csv
"""

import argparse
import contextlib
import logging
import sys
import threading
from typing import List, Optional

from botocore.exceptions import BotoCoreError

from density_utils.bedrock import BedrockCompletionService
from density_utils.ingredients import (
    MatchSettings,
    ReferenceCatalog,
    resolve_missing_densities,
)
from density_utils.tables import (
    load_missing_csv,
    load_reference_csv,
    open_output_writer,
)

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Match ingredients with missing densities to a reference list using an LLM."
    )
    parser.add_argument("--region", default="eu-west-1", help="The AWS region")
    parser.add_argument("--model", required=True, help="The Bedrock model to use")
    parser.add_argument(
        "--reference",
        default="density_reference.csv",
        help="Path to density reference CSV file",
    )
    parser.add_argument(
        "--missing",
        default="missing_ingredients.csv",
        help="Path to missing ingredients CSV file",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=1,
        help="Limit the number of records to process (0 for no limit)",
    )
    parser.add_argument(
        "--out", help="Path to output CSV file for filled missing densities"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of records to match in parallel (default: 1)",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=5,
        help="Model requests allowed per ingredient (default: 5)",
    )
    parser.add_argument(
        "--max-tokens",
        type=int,
        default=10000,
        help="Maximum tokens per model response (default: 10000)",
    )
    parser.add_argument(
        "--temperature",
        type=float,
        default=0.3,
        help="Sampling temperature (default: 0.3)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Using {args.model} in {args.region}")

    try:
        service = BedrockCompletionService(args.model, region_name=args.region)
    except BotoCoreError as e:
        logger.error(f"Couldn't create Bedrock client. Have you set up your AWS account? {e}")
        return 1

    try:
        catalog = ReferenceCatalog(load_reference_csv(args.reference))
        missing = load_missing_csv(args.missing)
    except (OSError, ValueError) as e:
        logger.error(f"Error loading input CSV: {e}")
        return 1

    settings = MatchSettings(
        max_attempts=args.max_attempts,
        max_tokens=args.max_tokens,
        temperature=args.temperature,
    )
    cancel_event = threading.Event()

    with contextlib.ExitStack() as stack:
        writer = None
        if args.out:
            logger.info(f"Writing output to {args.out}")
            try:
                writer = stack.enter_context(open_output_writer(args.out))
            except OSError as e:
                logger.error(f"Error creating output file: {e}")
                return 1

        try:
            resolve_missing_densities(
                missing,
                catalog,
                service,
                limit=args.limit,
                writer=writer,
                settings=settings,
                max_workers=args.workers,
                cancel_event=cancel_event,
            )
        except KeyboardInterrupt:
            logger.warning("Processing interrupted by user")
            return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
