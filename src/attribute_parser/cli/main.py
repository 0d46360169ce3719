"""Main CLI entry point for the attribute-parser command-line tool.

Provides commands to answer attribute queries for a session read from a file
or stdin, to validate markup files, and to dump the parsed tree.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from attribute_parser import __version__
from attribute_parser.api import AttributeParser, parse_lines
from attribute_parser.shared import (
    AttributeParserError,
    ConfigError,
    MarkupError,
    ParserConfig,
    configure_logging,
    get_logger,
)

STDIN_MARKER = "-"
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="attribute-parser",
        description="Parse line-oriented tag markup and resolve attribute path queries"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Require a closed root tag and non-empty attribute values"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser(
        "run", help="Answer queries for a session (header, markup, queries)"
    )
    run_parser.add_argument(
        "input",
        nargs="?",
        default=STDIN_MARKER,
        help="Session input file (default: stdin)"
    )
    run_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Check that markup files are well formed"
    )
    validate_parser.add_argument(
        "paths",
        nargs="*",
        default=[STDIN_MARKER],
        help="Markup files to validate (default: stdin)"
    )
    validate_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format"
    )
    validate_parser.add_argument(
        "--stats",
        action="store_true",
        help="Include performance metrics"
    )

    # Dump command
    dump_parser = subparsers.add_parser("dump", help="Print the parsed tag tree")
    dump_parser.add_argument(
        "input",
        nargs="?",
        default=STDIN_MARKER,
        help="Markup file (default: stdin)"
    )
    dump_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format"
    )
    dump_parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="Indentation width (default: 2)"
    )

    return parser


def load_config(args: argparse.Namespace) -> ParserConfig:
    """Build the parser configuration from a config file and flags."""
    config = ParserConfig.from_file(args.config) if args.config else ParserConfig()
    if args.strict:
        config = config.override(
            tokenizer__allow_empty_values=False,
            tree__require_root_closed=True,
        )
    return config


def read_input_lines(source: str) -> List[str]:
    """Read all lines from a file path or stdin."""
    if source == STDIN_MARKER:
        return sys.stdin.read().splitlines()
    return Path(source).read_text(encoding="utf-8").splitlines()


def format_diagnostic(error: Exception) -> str:
    """Render an error for stderr."""
    if isinstance(error, MarkupError):
        return error.format_diagnostic()
    return str(error)


def cmd_run(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle run command."""
    lines = read_input_lines(args.input)
    output = AttributeParser(config).run(lines)
    text = "".join(f"{line}\n" for line in output)

    if args.output:
        args.output.write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
    return EXIT_OK


def validate_source(
    source: str, config: ParserConfig, include_stats: bool = False
) -> Dict[str, Any]:
    """Validate one markup source and describe the outcome."""
    label = "<stdin>" if source == STDIN_MARKER else source
    try:
        result = parse_lines(read_input_lines(source), config)
    except MarkupError as e:
        return {
            "file": label,
            "valid": False,
            "error": e.message,
            "line_number": e.line_number,
        }
    except (OSError, UnicodeDecodeError) as e:
        return {"file": label, "valid": False, "error": str(e), "line_number": None}

    report: Dict[str, Any] = {
        "file": label,
        "valid": True,
        "node_count": result.node_count,
        "root": result.root.name if result.root else None,
        "diagnostics": [diag.to_dict() for diag in result.diagnostics],
    }
    if include_stats:
        report["performance"] = result.performance.to_dict()
    return report


def format_validation(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format validation results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2)

    valid_count = sum(1 for r in results if r.get("valid", False))
    lines = [f"Validated {len(results)} files, {valid_count} valid", "-" * 50]
    for result in results:
        status = "OK" if result["valid"] else "FAIL"
        lines.append(f"{status} {result['file']}")
        if result["valid"]:
            lines.append(f"   Root: {result['root']}, Tags: {result['node_count']}")
            performance = result.get("performance")
            if performance:
                lines.append(
                    f"   Time: {performance['processing_time_ms']:.2f}ms, "
                    f"Memory: {performance['memory_used_bytes']} bytes"
                )
        elif result.get("line_number") is not None:
            lines.append(f"   Line {result['line_number']}: {result['error']}")
        else:
            lines.append(f"   {result['error']}")
    return "\n".join(lines)


def cmd_validate(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle validate command."""
    results = [validate_source(path, config, args.stats) for path in args.paths]
    print(format_validation(results, args.format))
    return EXIT_OK if all(r["valid"] for r in results) else EXIT_FAILURE


def cmd_dump(args: argparse.Namespace, config: ParserConfig) -> int:
    """Handle dump command."""
    result = parse_lines(read_input_lines(args.input), config)
    if args.format == "json":
        print(json.dumps(result.tree.to_dict(), indent=args.indent))
    else:
        rendered = result.tree.render(indent=args.indent)
        if rendered:
            print(rendered)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_FAILURE

    try:
        config = load_config(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")
    else:
        configure_logging(config.logging.level)

    logger = get_logger(__name__, None, "cli")
    handlers = {
        "run": cmd_run,
        "validate": cmd_validate,
        "dump": cmd_dump,
    }

    try:
        return handlers[args.command](args, config)
    except AttributeParserError as e:
        print(format_diagnostic(e), file=sys.stderr)
        return EXIT_FAILURE
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Input could not be read", extra={"error": str(e)})
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


def entry_point() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    entry_point()
