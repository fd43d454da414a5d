"""Command line entry point: ``dex-trade-forensics analyze trades.csv``."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dex_trade_forensics.alerter.formatter import ReportFormatter
from dex_trade_forensics.config import get_settings
from dex_trade_forensics.ingestor.csv_source import CsvSourceError, read_trade_rows
from dex_trade_forensics.pipeline import AnalysisPipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dex-trade-forensics",
        description="Heuristic manipulation analysis of a DEX trade log",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze a CSV trade log")
    analyze.add_argument("csv", type=Path, help="Trade log in CSV format")
    analyze.add_argument("--report", type=Path, help="Write the Markdown report here")
    analyze.add_argument("--json", type=Path, help="Write the analysis as JSON here")
    analyze.add_argument(
        "--compact", action="store_true", help="Only overview and key findings in the report"
    )
    return parser


def run_analyze(args: argparse.Namespace) -> int:
    settings = get_settings()
    logger.info("Starting analysis with settings: %s", settings.summary())

    try:
        rows = read_trade_rows(args.csv)
    except CsvSourceError as e:
        logger.error("Cannot read trade log: %s", e)
        return 1

    result = AnalysisPipeline(settings).run(rows)
    formatter = ReportFormatter(verbosity="compact" if args.compact else "detailed")
    report = formatter.format(result)

    if args.report:
        args.report.write_text(report, encoding="utf-8")
        logger.info("Report written to %s", args.report)
    else:
        sys.stdout.write(report)

    if args.json:
        args.json.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        logger.info("JSON written to %s", args.json)

    for note in result.stats.notes:
        logger.warning("%s", note)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=get_settings().get_logging_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "analyze":
        return run_analyze(args)
    return 2


if __name__ == "__main__":
    sys.exit(main())
