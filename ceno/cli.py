"""
ceno.cli: Command-line interface.

Usage:
    ceno-errors codes [--config CONFIG]
    ceno-errors render CODE [--message MESSAGE] [--url URL] [--config CONFIG]
    ceno-errors report URL MESSAGE [--config CONFIG]
    ceno-errors validate [--config CONFIG]
"""

import argparse
import json
import sys
from pathlib import Path

from ceno.codes import ErrorCode, describe, origin
from ceno.config import CenoConfig
from ceno.dispatch import CC_ERROR_HANDLERS, LCS_ERROR_HANDLERS
from ceno.errors import CenoError, ViewMissingError
from ceno.i18n import available_locales, load_catalog
from ceno.logger import configure_logger, get_logger
from ceno.render import PAGE_TEXT_KEYS, ErrorPageRenderer
from ceno.report import ErrorReporter
from ceno.state import ErrorState
from ceno.tables import ERROR_ADVICE, should_refresh

CONFIG_CANDIDATES = ["ceno.yaml", "ceno.yml", ".ceno.yaml", ".ceno.yml"]


def cmd_codes(args: argparse.Namespace) -> int:
    """List every known error code with its policies."""
    for code in sorted(ErrorCode):
        handler = CC_ERROR_HANDLERS.get(code) or LCS_ERROR_HANDLERS.get(code)
        print(json.dumps({
            "code": int(code),
            "name": describe(code),
            "origin": origin(code),
            "advice": ERROR_ADVICE.get(code),
            "refresh": should_refresh(code),
            "handler": handler.__name__ if handler else None,
        }, ensure_ascii=False))
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    """Render the error page for a code to stdout."""
    config = load_config(args.config)
    configure_logger(config.logging.level)

    renderer = ErrorPageRenderer(config)
    page = renderer.render(args.code, args.message, args.url)
    print(page.body)
    return 1 if page.degraded else 0


def cmd_report(args: argparse.Namespace) -> int:
    """Send a decode-error report."""
    config = load_config(args.config)
    configure_logger(config.logging.level)

    reporter = ErrorReporter(config)
    state = ErrorState(
        message=args.message,
        code=ErrorCode.ERR_MALFORMED_LCS_RESPONSE,
        report_url=args.url,
    )
    try:
        delivered = reporter.report_decode_error(state)
    finally:
        reporter.close()

    return 0 if delivered else 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate configuration, the error template and the default catalog."""
    config = load_config(args.config)
    configure_logger(config.logging.level)
    logger = get_logger()

    errors = config.validate()
    if errors:
        print("Configuration errors:")
        for error in errors:
            print(f"  - {error}")
        return 1

    print("Configuration is valid")
    problems = []

    try:
        ErrorPageRenderer(config).load_template()
    except ViewMissingError as e:
        problems.append(e.message)

    locales = available_locales(config.locale.translations_dir)
    if config.locale.default not in locales:
        problems.append(f"No catalog for default locale {config.locale.default}")
    else:
        path = Path(config.locale.translations_dir) / f"{config.locale.default}.yaml"
        try:
            catalog = load_catalog(str(path))
        except CenoError as e:
            problems.append(e.message)
        else:
            required = {key for key in ERROR_ADVICE.values() if key}
            required.update(PAGE_TEXT_KEYS.values())
            required.update({"unrecognized_error_code", "missing_view"})
            for key in sorted(required - set(catalog)):
                problems.append(f"Catalog {config.locale.default} lacks '{key}'")

    for problem in problems:
        print(f"  - {problem}")
        logger.error(problem, stage="validate")

    print(f"\nLocales available: {', '.join(locales) or 'none'}")
    return 1 if problems else 0


def load_config(config_path: str | None) -> CenoConfig:
    """Load configuration from file, or use defaults when there is none."""
    if config_path:
        path = Path(config_path)
        if not path.exists():
            print(f"Configuration file not found: {path}", file=sys.stderr)
            sys.exit(1)
        return CenoConfig.from_yaml(path)

    for candidate in CONFIG_CANDIDATES:
        path = Path(candidate)
        if path.exists():
            return CenoConfig.from_yaml(path)
    return CenoConfig()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="ceno-errors",
        description="CENO client error pages and error reports",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("codes", help="List known error codes")

    render_parser = subparsers.add_parser("render", help="Render the error page for a code")
    render_parser.add_argument("code", type=int, help="Error code")
    render_parser.add_argument("-m", "--message", default="", help="Error message to show")
    render_parser.add_argument("-u", "--url", default="", help="URL the user asked for")
    render_parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
    )

    report_parser = subparsers.add_parser("report", help="Send a decode-error report")
    report_parser.add_argument("url", help="Endpoint to report to")
    report_parser.add_argument("message", help="Error message to report")
    report_parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
    )

    validate_parser = subparsers.add_parser("validate", help="Validate configuration and assets")
    validate_parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
    )

    args = parser.parse_args(argv)

    if args.command == "codes":
        return cmd_codes(args)
    elif args.command == "render":
        return cmd_render(args)
    elif args.command == "report":
        return cmd_report(args)
    elif args.command == "validate":
        return cmd_validate(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
