"""Argument parsing functionality for the gi-types package builder."""

import argparse

from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="gi-types-builder",
        description=(
            "Generate and synchronize package.json manifests for @gi-types packages"
        ),
        add_help=True,
    )

    parser.add_argument("path",
                        help="Group path, e.g. 'gjs'. Packages are read from "
                             "../<path>/packages/@gi-types/ unless --directory is given.",
                        action="store", type=str)
    parser.add_argument("-d", "--directory",
                        dest="DIRECTORY",
                        help="Explicit base directory holding one subdirectory per package.",
                        action="store", type=str)
    parser.add_argument("-t", "--tag",
                        dest="TAG",
                        help="npm dist-tag for publishing and registry lookups (default: latest)",
                        action="store", type=str)
    parser.add_argument("--no-increment",
                        dest="INCREMENT",
                        help="Do not bump the patch version of previously published packages.",
                        action="store_false")
    parser.add_argument("--private",
                        dest="PRIVATE",
                        help="Mark generated manifests private instead of publishable.",
                        action="store_true")
    parser.add_argument("--no-registry",
                        dest="USE_REGISTRY",
                        help="Do not query the npm registry for imports missing locally.",
                        action="store_false")
    parser.add_argument("--registry-url",
                        dest="REGISTRY_URL",
                        help="npm registry base URL.",
                        action="store", type=str)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="Registry request timeout in seconds.",
                        action="store", type=int)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML config file.",
                        action="store", type=str)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Write the run summary as JSON to this path.",
                        action="store", type=str)
    parser.add_argument("--error-on-failures",
                        dest="ERROR_ON_FAILURES",
                        help="Exit with a non-zero status code if any package failed.",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not print the run summary to the console.",
                        action="store_true")

    return parser.parse_args(argv)


def base_directory(args) -> str:
    """Base directory for a run: --directory, or the group layout under ../<path>."""
    if getattr(args, "DIRECTORY", None):
        return args.DIRECTORY
    return Constants.GROUP_ROOT_TEMPLATE.format(path=args.path, prefix=Constants.PACKAGE_PREFIX)
