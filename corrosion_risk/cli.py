"""
Command Line Evaluation — Datapoints File to Results Table

Usage:
    corrosion-evaluate datapoints.json
    corrosion-evaluate datapoints.json --norm-file norms.json --norm-id my-norm
    corrosion-evaluate datapoints.json --csv results.csv
"""

import argparse
import logging
import sys
from typing import List, Optional

import pandas as pd

from corrosion_risk.config import settings
from corrosion_risk.reports import class_summary, ratings_frame, results_to_frame
from corrosion_risk.rules import evaluate_datapoints
from corrosion_risk.schemas import EvaluationStatus
from corrosion_risk.storage import NormNotFoundError, build_registry, load_datapoints_file


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Rate and classify datapoints against a corrosion norm"
    )
    parser.add_argument("datapoints", help="JSON file with a list of datapoints")
    parser.add_argument(
        "--norm-file",
        default=settings.NORMS_FILE,
        help="JSON file with additional norms"
    )
    parser.add_argument(
        "--norm-id",
        default=settings.DEFAULT_NORM_ID,
        help=f"Norm to evaluate against (default: {settings.DEFAULT_NORM_ID})"
    )
    parser.add_argument("--csv", help="Write the results table to this CSV file")
    parser.add_argument(
        "--ratings",
        action="store_true",
        help="Also print the per-parameter rating matrix"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=settings.LOG_LEVEL)

    registry = build_registry(args.norm_file)
    try:
        norm = registry.get(args.norm_id)
    except NormNotFoundError:
        print(f"Unknown norm '{args.norm_id}'", file=sys.stderr)
        return 2

    try:
        datapoints = load_datapoints_file(args.datapoints)
    except (OSError, ValueError) as e:
        print(f"Could not read datapoints: {e}", file=sys.stderr)
        return 2

    batch = evaluate_datapoints(
        datapoints,
        norm,
        parameters=registry.parameters(),
        primary_output=settings.PRIMARY_OUTPUT,
    )

    for issue in batch.configuration_issues:
        print(f"[{issue.code}] {issue.message}", file=sys.stderr)
    if batch.status == EvaluationStatus.NOT_CONFIGURED:
        print(f"Norm '{norm.name}' is not configured: no outputs to compute", file=sys.stderr)
        return 1

    frame = results_to_frame(batch.results)
    with pd.option_context("display.max_columns", None, "display.width", 120):
        print(frame.to_string(index=False))
        print()
        print(class_summary(frame).to_string())
        if args.ratings:
            print()
            print(ratings_frame(batch.results, norm.parameter_codes).to_string())

    if args.csv:
        frame.to_csv(args.csv, index=False)
        logger.info(f"Wrote {len(frame)} row(s) to {args.csv}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
