"""gi-types builder - generate package manifests for @gi-types packages.

    Returns:
        int: Exit code
"""
import asyncio
import json
import logging
import sys

from constants import ExitCodes
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import base_directory, parse_args
from cli_config import apply_config_overrides
from manifest.pipeline import build_packages, format_summary
from versioning.errors import BuilderError

logger = logging.getLogger(__name__)


def export_summary(summary, path):
    """Exports the run summary to a JSON file.

    Args:
        summary (RunSummary): Result of the run.
        path (str): File path to export the JSON.
    """
    try:
        with open(path, "w", encoding="utf-8") as file:
            json.dump(summary.to_dict(), file, indent=2)
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def run(args):
    """Run the builder for parsed arguments and return the run summary."""
    base_dir = base_directory(args)
    logging.info("Starting builder for %s", base_dir)
    return asyncio.run(
        build_packages(
            base_dir,
            args.path,
            tag=args.TAG,
            increment=args.INCREMENT,
            private=args.PRIVATE,
            use_registry=args.USE_REGISTRY,
        )
    )


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, getattr(args, "LOG_FILE", None))

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        apply_config_overrides(args)
    except Exception as e:  # pylint: disable=broad-exception-caught
        logging.error("Failed to load config: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    try:
        summary = run(args)
    except BuilderError as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    if not args.QUIET:
        print(format_summary(summary))
    logging.info("Packages built...")

    if args.OUTPUT:
        export_summary(summary, args.OUTPUT)

    if args.ERROR_ON_FAILURES and summary.failure_count:
        sys.exit(ExitCodes.PACKAGE_FAILURES.value)
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
