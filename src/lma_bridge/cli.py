"""
Command-line interface for LMA Bridge.

Usage:
    lma-bridge analyze agreement.pdf
    lma-bridge analyze agreement.docx --strategy remote --json
    lma-bridge extract agreement.txt
"""

import argparse
import json
import logging
import sys
from typing import Optional

import structlog

from .config import ExtractionStrategy, LMABridgeConfig
from .documents import load_document
from .exceptions import LMABridgeError
from .extractor import PatternLoanExtractor
from .service import analyze_loan

FIELD_LABELS = {
    "borrower_name": "Borrower",
    "facility_amount": "Facility amount",
    "currency": "Currency",
    "interest_rate_margin": "Margin (%)",
    "leverage_covenant": "Max leverage",
    "esg_target": "ESG target",
}


def configure_logging(level: str) -> None:
    """Send structlog output to stderr at the configured level."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def _print_fields(data: dict) -> None:
    for name, label in FIELD_LABELS.items():
        value = data.get(name)
        if value is None:
            value = "-"
        elif name == "facility_amount":
            value = f"{value:,.2f}"
        print(f"  {label + ':':<17} {value}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lma-bridge",
        description="Extract key commercial terms from loan agreements",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Local pattern engine, human-readable summary
  lma-bridge analyze facility_agreement.pdf

  # Remote model with local fallback, JSON output
  lma-bridge analyze facility_agreement.docx --strategy remote --json
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser(
        "analyze",
        help="Extract, sanitize and validate loan terms",
    )
    analyze.add_argument("path", help="Path to a .txt, .pdf or .docx agreement")
    analyze.add_argument(
        "--strategy",
        choices=[strategy.value for strategy in ExtractionStrategy],
        default=None,
        help="Extraction strategy (default: LMA_BRIDGE_EXTRACTION_STRATEGY or local)",
    )
    analyze.add_argument("--json", action="store_true", help="Print the response as JSON")

    extract = subparsers.add_parser(
        "extract",
        help="Run the local pattern engine only and print the raw result as JSON",
    )
    extract.add_argument("path", help="Path to a .txt, .pdf or .docx agreement")

    return parser


def _run_analyze(args: argparse.Namespace, config: LMABridgeConfig) -> int:
    if args.strategy:
        extraction = config.extraction.model_copy(
            update={"strategy": ExtractionStrategy(args.strategy)}
        )
        config = config.model_copy(update={"extraction": extraction})

    document = load_document(args.path)
    response = analyze_loan(document.text, config=config)

    if args.json:
        print(json.dumps(response.to_dict(), indent=2))
        return 0 if response.success else 1

    if not response.success:
        print(f"Analysis failed: {response.error.value}")
        for suggestion in response.suggestions:
            print(f"  - {suggestion}")
        return 1

    print("=" * 60)
    print(f"Document:    {document.metadata['file_name']}")
    print(f"Words:       {document.metadata['word_count']:,}")
    print(f"Method:      {response.method}")
    print(f"Confidence:  {response.confidence:.1%}")
    print("=" * 60)
    _print_fields(response.data)

    if response.validation_errors:
        print()
        print("Needs review:")
        for error in response.validation_errors:
            print(f"  - {error}")

    if response.suggestions:
        print()
        print("Suggestions:")
        for suggestion in response.suggestions:
            print(f"  - {suggestion}")

    return 0


def _run_extract(args: argparse.Namespace) -> int:
    document = load_document(args.path)
    result = PatternLoanExtractor().extract(document.text)
    print(json.dumps(result.to_dict(), indent=2))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the lma-bridge command."""
    args = _build_parser().parse_args(argv)

    config = LMABridgeConfig()
    configure_logging(config.log_level)

    try:
        if args.command == "analyze":
            return _run_analyze(args, config)
        return _run_extract(args)
    except LMABridgeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

