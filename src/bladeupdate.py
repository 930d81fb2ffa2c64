"""blade update - self-update for the blade CLI

    Returns:
        int: Exit code
"""
import sys

from args import parse_args
from cli_update import run_update


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    sys.exit(run_update(args).value)


if __name__ == "__main__":
    main()
