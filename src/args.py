"""Argument parsing functionality for blade update."""

import argparse

from constants import Constants


def build_parser() -> argparse.ArgumentParser:
    """Build the parser for the update command."""
    parser = argparse.ArgumentParser(
        prog="blade-update",
        description=(
            "Check for and install newer blade builds from the release or snapshot repository"
        ),
        add_help=True,
    )

    parser.add_argument("--check-only",
                        dest="CHECK_ONLY",
                        help="Only check for updates, do not install anything.",
                        action="store_true")

    channel_group = parser.add_mutually_exclusive_group()
    channel_group.add_argument("-r", "--release",
                               dest="RELEASE",
                               help="Update to the latest release build.",
                               action="store_true")
    channel_group.add_argument("-s", "--snapshots",
                               dest="SNAPSHOTS",
                               help="Update to the latest snapshot build.",
                               action="store_true")

    parser.add_argument("--url",
                        dest="URL",
                        help=f"Repository base URL to update from (overrides {Constants.UPDATE_URL_FILE})",
                        action="store",
                        type=str)
    parser.add_argument("--trace",
                        dest="TRACE",
                        help="Print the full stack trace when the update check fails.",
                        action="store_true")
    parser.add_argument("-b", "--base",
                        dest="BASE",
                        help="Working directory for the install command.",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)
    parser.add_argument("--binary",
                        dest="BINARY",
                        help="Path of the installed blade jar to compare against the repository checksum.",
                        action="store",
                        type=str)
    parser.add_argument("--current-version",
                        dest="CURRENT_VERSION",
                        help=argparse.SUPPRESS,
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='WARNING')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
