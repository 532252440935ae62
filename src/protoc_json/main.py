from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from protoc_json.config import VERSION
from protoc_json.errors import ProtoError
from protoc_json.parser.proto_parser import parse_file
from protoc_json.serializer import to_json
from protoc_json.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

CREDITS = f"""\
protoc-json {VERSION}
Converts Protocol Buffer (.proto) files to JSON without protoc.

Built with:
- Python
- structlog (logging)
- pytest (tests)
"""


def run_parse(file: str, output: Optional[str], pretty: bool) -> int:
    """Parse ``file`` and write JSON to ``output`` or stdout."""
    try:
        result = to_json(parse_file(file), pretty=pretty)
    except ProtoError as e:
        logger.debug("parse_failed", path=file, error=str(e))
        print(f"Error parsing file: {e}", file=sys.stderr)
        return 1

    if output is None:
        print(result)
        return 0

    try:
        Path(output).write_text(result + "\n", encoding="utf-8")
    except OSError as e:
        logger.debug("write_failed", path=output, error=str(e))
        print(f"Error writing to file: {e}", file=sys.stderr)
        return 1
    logger.info("json_written", path=output)
    return 0


def run_validate(file: str) -> int:
    """Parse ``file`` without producing JSON."""
    try:
        parse_file(file)
    except ProtoError as e:
        print(f"Validation failed: {e}", file=sys.stderr)
        return 1
    print("File is valid")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="protoc-json",
        description="Convert Protocol Buffer (.proto) files to JSON",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    parse_cmd = sub.add_parser("parse", help="Parse a .proto file and output JSON")
    parse_cmd.add_argument("file", metavar="FILE", help="Input .proto file")
    parse_cmd.add_argument(
        "-o",
        "--output",
        metavar="OUTPUT",
        help="Output file (defaults to stdout)",
    )
    parse_cmd.add_argument(
        "-p",
        "--pretty",
        action="store_true",
        help="Pretty print the JSON output",
    )

    validate_cmd = sub.add_parser("validate", help="Check a .proto file without generating JSON")
    validate_cmd.add_argument("file", metavar="FILE", help="Input .proto file")

    sub.add_parser("credits", help="Display version and credits information")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "parse":
        code = run_parse(args.file, args.output, args.pretty)
    elif args.command == "validate":
        code = run_validate(args.file)
    else:
        print(CREDITS)
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    main()
