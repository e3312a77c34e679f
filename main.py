# main.py

"""Entry point for the noonsync command line."""

import argparse
import logging
import sys

from noonsync.config.logging_config import setup_logging
from noonsync.config.settings import Settings

logger = logging.getLogger("noonsync.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="noonsync",
        description="Noon storefront catalog sync.",
        epilog=f"Store: {Settings.STORE_URL}",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    sync = commands.add_parser(
        "sync", help="Sync the catalog (falls back to bundled data)."
    )
    sync.add_argument(
        "--endpoint",
        default=None,
        help="Sync endpoint URL (default: run the handler in-process).",
    )
    sync.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    sync.add_argument(
        "--save",
        action="store_true",
        default=False,
        help="Also save the batch under results/.",
    )
    sync.add_argument(
        "--csv",
        action="store_true",
        default=False,
        dest="csv_export",
        help="Also export the batch as CSV under results/.",
    )

    capture = commands.add_parser(
        "capture", help="Extract products from a saved rendered page."
    )
    capture.add_argument("html_path", help="Path to the saved page HTML.")
    capture.add_argument(
        "--url",
        default=Settings.STORE_URL,
        dest="page_url",
        help="Address the page was saved from.",
    )
    capture.add_argument(
        "-o",
        "--output",
        default=None,
        dest="output_path",
        help="Write the JSON to a file instead of the clipboard.",
    )

    import_cmd = commands.add_parser(
        "import", help="Validate a pasted product JSON export."
    )
    import_cmd.add_argument("json_path", help="Path to the JSON file.")
    import_cmd.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="table",
        dest="output_format",
        help="Output format (default: table).",
    )

    serve = commands.add_parser("serve", help="Serve GET /api/products.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=3000)
    return parser


def main() -> None:
    """Route to the requested sub-command."""
    log_file = setup_logging()
    logger.info("noonsync starting, log file: %s", log_file)

    args = _build_parser().parse_args()

    from noonsync.cli import runner

    if args.command == "sync":
        sys.exit(runner.run_sync(
            args.endpoint, args.output_format, args.save, args.csv_export
        ))
    elif args.command == "capture":
        sys.exit(
            runner.run_capture(args.html_path, args.page_url, args.output_path)
        )
    elif args.command == "import":
        sys.exit(runner.run_import(args.json_path, args.output_format))
    else:
        try:
            runner.run_server(args.host, args.port)
        except Exception:
            logger.critical("Fatal error in sync server", exc_info=True)
            raise
        finally:
            logger.info("noonsync server shutting down")


if __name__ == "__main__":
    main()
