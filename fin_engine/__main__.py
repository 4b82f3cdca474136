"""
FIN Engine - Main Entry Point

Command line access to the FIN codec:

    python -m fin_engine decode message.fin --json
    python -m fin_engine normalize message.fin
    python -m fin_engine validate message.fin
    python -m fin_engine field 32A 230115EUR1000,00
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from fin_engine.core.config import Config, ParseMode, set_config
from fin_engine.core.exceptions import ConfigurationException
from fin_engine.core.structured_logging import LogCategory, LogContext, configure_logging
from fin_engine.protocols.swift.field_pattern import Field
from fin_engine.protocols.swift.message_assembler import MessageAssembler
from fin_engine.protocols.swift.swift_errors import FieldPatternError, SwiftParseError
from fin_engine.protocols.swift.swift_validator import SwiftValidator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_DECODE_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fin-engine",
        description="FIN Engine - SWIFT FIN (MT) message decoder and encoder",
    )

    # Configuration
    parser.add_argument("--config", type=str, help="Configuration file path")

    # Logging
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level",
    )
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit logs as JSON lines"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    decode = subparsers.add_parser("decode", help="Decode a message and print it")
    decode.add_argument("path", help="Message file ('-' for stdin)")
    decode.add_argument("--lenient", action="store_true", help="Best-effort decoding")
    decode.add_argument("--json", action="store_true", help="Print as JSON")

    normalize = subparsers.add_parser(
        "normalize", help="Decode and re-encode a message"
    )
    normalize.add_argument("path", help="Message file ('-' for stdin)")
    normalize.add_argument("--lenient", action="store_true", help="Best-effort decoding")

    validate = subparsers.add_parser("validate", help="Validate a message")
    validate.add_argument("path", help="Message file ('-' for stdin)")
    validate.add_argument("--lenient", action="store_true", help="Best-effort decoding")
    validate.add_argument(
        "--strict", action="store_true", help="Treat warnings as errors"
    )

    field = subparsers.add_parser("field", help="Split a field value into components")
    field.add_argument("name", help="Field name, e.g. 32A")
    field.add_argument("value", help="Raw field value")

    return parser


def load_settings(args: argparse.Namespace) -> Config:
    """Resolve configuration from file or environment, then apply CLI overrides."""
    if args.config:
        config = Config.load_from_file(args.config)
    else:
        config = Config.load_from_env()

    if getattr(args, "lenient", False):
        config.parser.mode = ParseMode.LENIENT
    set_config(config)
    return config


def read_message(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    # Keep CRLF line breaks as they are on the wire
    with open(Path(path), "r", encoding="utf-8", newline="") as f:
        return f.read()


def print_summary(message, out) -> None:
    print(f"Message type: MT{message.message_type or '???'}", file=out)
    if message.direction is not None:
        print(f"Direction:    {message.direction.name.lower()}", file=out)
    print(f"Sender:       {message.sender or '-'}", file=out)
    print(f"Receiver:     {message.receiver or '-'}", file=out)
    if message.mur:
        print(f"MUR:          {message.mur}", file=out)
    if message.uetr:
        print(f"UETR:         {message.uetr}", file=out)
    if message.block4 is not None:
        print("Fields:", file=out)
        for tag in message.block4:
            lines = (tag.value or "").splitlines() or [""]
            print(f"  :{tag.name}: {lines[0]}", file=out)
            for line in lines[1:]:
                print(f"  {' ' * (len(tag.name) + 2)} {line}", file=out)


def run(args: argparse.Namespace, config: Config, out=None) -> int:
    out = out or sys.stdout

    if args.command == "field":
        field = Field.of(args.name, args.value)
        try:
            components = field.components
        except FieldPatternError as e:
            print(f"Cannot split field {args.name}: {e}", file=sys.stderr)
            return EXIT_INVALID
        for position, component in enumerate(components, 1):
            print(
                f"{position} [{field.component_type(position)}] "
                f"{'<absent>' if component is None else repr(component)}",
                file=out,
            )
        error = field.validate()
        if error:
            print(f"Invalid: {error}", file=out)
            return EXIT_INVALID
        return EXIT_OK

    assembler = MessageAssembler.from_config(config)
    try:
        message = assembler.decode(read_message(args.path))
    except SwiftParseError as e:
        logger.error(
            f"Failed to decode {args.path}: {e}",
            extra={
                "category": LogCategory.PARSING,
                "context": LogContext(source=args.path, operation=args.command),
            },
        )
        return EXIT_DECODE_ERROR

    if args.command == "decode":
        if args.json:
            print(json.dumps(message.to_dict(), indent=2), file=out)
        else:
            print_summary(message, out)
        return EXIT_OK

    if args.command == "normalize":
        out.write(assembler.encode(message))
        out.write("\n")
        return EXIT_OK

    validator = SwiftValidator.from_config(config.validation, strict=args.strict)
    result = validator.validate(message)
    for error in result.errors:
        print(f"ERROR   {error.code} {error.field_name}: {error.message}", file=out)
    for warning in result.warnings:
        print(f"WARNING {warning.code} {warning.field_name}: {warning.message}", file=out)
    print("valid" if result.is_valid else "invalid", file=out)
    return EXIT_OK if result.is_valid else EXIT_INVALID


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the FIN engine command line."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_settings(args)
    except ConfigurationException as e:
        configure_logging(args.log_level or "WARNING", json_format=args.json_logs)
        logger.error(
            f"Configuration error: {e}", extra={"category": LogCategory.CONFIGURATION}
        )
        return EXIT_DECODE_ERROR

    # Command line flags win over the configuration
    configure_logging(
        args.log_level or config.effective_log_level.value,
        json_format=args.json_logs or config.json_logs,
        service_fields=config.service_fields(),
    )
    logger.debug(
        f"Running {args.command} with {config.parser.mode.value} decoding",
        extra={"category": LogCategory.CONFIGURATION},
    )

    try:
        return run(args, config)
    except OSError as e:
        logger.error(f"Cannot read input: {e}")
        return EXIT_DECODE_ERROR


if __name__ == "__main__":
    sys.exit(main())
